# Copyright (C) 2017 The OpenTimestamps developers
#
# This file is part of the OpenTimestamps Viewer.
#
# It is subject to the license terms in the LICENSE file found in the top-level
# directory of this distribution.
#
# No part of the OpenTimestamps Viewer, including this file, may be copied,
# modified, propagated, or distributed except according to the terms contained
# in the LICENSE file.

"""Linearize a proof tree into displayable steps

Every step of the tree becomes one or more DisplayedStep records, in pre-order.
The result strings carry light HTML markup (<b>, <tt>, <font>) that is meant to
be rendered as-is; everything interpolated into them is hex, a block height, or
a pending URI that has already been restricted to a safe character set.
"""

import collections
import types

from bitcoin.core import CTransaction, SerializationError, b2x, b2lx

from opentimestamps.core.op import OpSHA1, OpSHA256, OpRIPEMD160, OpKECCAK256, OpReverse, OpHexlify, OpAppend, OpPrepend
from opentimestamps.core.notary import BitcoinBlockHeaderAttestation, PendingAttestation, UnknownAttestation, TimeAttestation
from otsviewer.core.timestamp import Fork
from otsviewer.identity import doc_id

LABELS = types.MappingProxyType({
    'fork': 'Fork',
    'parse_tx': '(Parse TX)',
    'attestation': 'Attestation',
})

CSS_CLASSES = types.MappingProxyType({
    'fork': 'step_fork',
    'op': 'step_op',
    'parse_tx': 'step_parse',
    'attestation': 'step_attest',
})

OP_NAMES = types.MappingProxyType({
    OpSHA1: 'SHA1',
    OpSHA256: 'SHA256',
    OpKECCAK256: 'KECCAK256',
    OpRIPEMD160: 'RIPEMD160',
    OpReverse: 'Reverse',
    OpHexlify: 'Hexlify',
    OpAppend: 'Append',
    OpPrepend: 'Prepend',
})

ARG_PREVIEW_LENGTH = 3


DisplayedStep = collections.namedtuple('DisplayedStep', ['prefix', 'result', 'reason', 'css_class'])
"""One line of a rendered proof; css_class is the CSS class of the table row"""


def parse_transaction(data):
    """Try to interpret bytes as a Bitcoin transaction

    Returns the CTransaction, or None if the bytes aren't one.
    """
    try:
        return CTransaction.deserialize(data)
    except (SerializationError, ValueError):
        return None


def _arg_preview(op):
    return '%s(%s...)' % (OP_NAMES[op.__class__], b2x(op[0][0:ARG_PREVIEW_LENGTH]))


def _render_attestation(attestation, prev_data):
    if isinstance(attestation, BitcoinBlockHeaderAttestation):
        # The proof holds the merkle root in internal byte order; b2lx gives
        # the reversed form block explorers show.
        return 'Merkle root <b>%s</b> of Bitcoin block <b>%d</b>' % (b2lx(prev_data), attestation.height)
    elif isinstance(attestation, PendingAttestation):
        return 'Pending attestation: server <b>%s</b>' % attestation.uri
    elif isinstance(attestation, UnknownAttestation):
        return 'Unknown attestation <b>%s</b>/<b>%s</b>' % (b2x(attestation.TAG), b2x(attestation.payload))
    else:
        raise TypeError("Unknown attestation type %r" % attestation.__class__)


def render_steps(step, prev_data, prefix=''):
    """Render a proof tree

    step      - Step to start from
    prev_data - Bytes the step is applied to; the start digest for the root
    prefix    - Branch path label, empty outside of any fork

    Yields DisplayedStep's, pre-order, depth-first, children in order.
    """
    data = step.data

    if isinstance(data, Fork):
        yield DisplayedStep(prefix,
                            'Fork into <b>%d</b> paths' % len(step.children),
                            LABELS['fork'],
                            CSS_CLASSES['fork'])

        for n, child in enumerate(step.children, 1):
            if not prefix:
                new_prefix = '%d ' % n
            else:
                new_prefix = '%s- %d ' % (prefix, n)
            yield from render_steps(child, prev_data, new_prefix)

    elif isinstance(data, OpAppend):
        yield DisplayedStep(prefix,
                            '<tt>%s<font color="green">%s</font></tt>' % (b2x(prev_data), b2x(data[0])),
                            _arg_preview(data),
                            CSS_CLASSES['op'])

        # Notice valid bitcoin transactions
        tx = parse_transaction(step.output)
        if tx is not None:
            yield DisplayedStep(prefix,
                                'Bitcoin transaction <b>%s</b>' % b2lx(tx.GetTxid()),
                                LABELS['parse_tx'],
                                CSS_CLASSES['parse_tx'])

        yield from render_steps(step.children[0], step.output, prefix)

    elif isinstance(data, OpPrepend):
        yield DisplayedStep(prefix,
                            '<tt><font color="green">%s</font>%s</tt>' % (b2x(data[0]), b2x(prev_data)),
                            _arg_preview(data),
                            CSS_CLASSES['op'])

        yield from render_steps(step.children[0], step.output, prefix)

    elif data.__class__ in OP_NAMES:
        yield DisplayedStep(prefix,
                            '<tt>%s</tt>' % b2x(step.output),
                            OP_NAMES[data.__class__],
                            CSS_CLASSES['op'])

        yield from render_steps(step.children[0], step.output, prefix)

    elif isinstance(data, TimeAttestation):
        yield DisplayedStep(prefix,
                            _render_attestation(data, prev_data),
                            LABELS['attestation'],
                            CSS_CLASSES['attestation'])

    else:
        raise TypeError("Unknown step data %r" % data)


def render_timestamp(start_digest, first_step):
    """Render a whole proof tree to a list of DisplayedStep's"""
    return list(render_steps(first_step, start_digest))


DisplayedTimestamp = collections.namedtuple('DisplayedTimestamp', ['id', 'title', 'start_hash', 'digest_type', 'steps'])

def display_timestamp(detached_timestamp):
    """Everything the entry page shows for a detached timestamp file"""
    start_digest = detached_timestamp.start_digest
    return DisplayedTimestamp(id=doc_id(detached_timestamp),
                              title='Timestamp of <tt>%s</tt>' % b2x(start_digest[0:6]),
                              start_hash=b2x(start_digest),
                              digest_type=OP_NAMES[detached_timestamp.file_hash_op.__class__],
                              steps=render_timestamp(start_digest, detached_timestamp.first_step))
