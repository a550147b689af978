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

import binascii

from opentimestamps.core.op import Op, CryptOp, MsgValueError
from opentimestamps.core.notary import (TimeAttestation, UnknownAttestation,
                                        PendingAttestation, BitcoinBlockHeaderAttestation)

import opentimestamps.core.serialize

class Fork:
    """Branch point in a proof

    The fork's input is carried forward unchanged along every branch.
    """
    __slots__ = []

    def __eq__(self, other):
        return other.__class__ is Fork

    def __hash__(self):
        return hash(Fork)

    def __repr__(self):
        return 'Fork()'

FORK = Fork()


def deserialize_attestation(ctx):
    """Deserialize an attestation, tag included

    Same layout as TimeAttestation.deserialize(), except that the payload of a
    known attestation type must be consumed exactly; anything left over raises
    TrailingGarbageError. Payloads of unknown types are kept as-is.
    """
    tag = ctx.read_bytes(TimeAttestation.TAG_SIZE)
    payload = ctx.read_varbytes(TimeAttestation.MAX_PAYLOAD_SIZE)

    payload_ctx = opentimestamps.core.serialize.BytesDeserializationContext(payload)
    if tag == PendingAttestation.TAG:
        attestation = PendingAttestation.deserialize(payload_ctx)
    elif tag == BitcoinBlockHeaderAttestation.TAG:
        attestation = BitcoinBlockHeaderAttestation.deserialize(payload_ctx)
    else:
        return UnknownAttestation(tag, payload)

    payload_ctx.assert_eof()
    return attestation


class Step:
    """One node of a proof tree

    data is either FORK, an Op, or a TimeAttestation. An op step has exactly one
    child, which continues from the op's output; a fork has one or more
    children, all continuing from the fork's input; attestations are leaves.

    Unlike opentimestamps.core.timestamp.Timestamp, which keeps ops and
    attestations in unordered sets, a Step tree keeps branches in the order
    they appear in the proof file. Steps are immutable once created.
    """
    __slots__ = ['__output', '__data', '__children']

    @property
    def output(self):
        return self.__output

    @property
    def data(self):
        return self.__data

    @property
    def children(self):
        return self.__children

    def __init__(self, output, data, children=()):
        if not isinstance(output, bytes):
            raise TypeError("Expected output to be bytes; got %r" % output.__class__)

        children = tuple(children)
        for child in children:
            if not isinstance(child, Step):
                raise TypeError("Expected children to be Steps; got %r" % child.__class__)

        if isinstance(data, Fork):
            if not children:
                raise ValueError("A fork needs at least one branch")
        elif isinstance(data, Op):
            if len(children) != 1:
                raise ValueError("An op step has exactly one child; got %d" % len(children))
        elif isinstance(data, TimeAttestation):
            if children:
                raise ValueError("Attestations can't have children")
        else:
            raise TypeError("Expected step data to be a fork, op or attestation; got %r" % data.__class__)

        self.__output = output
        self.__data = data
        self.__children = children

    def __eq__(self, other):
        if isinstance(other, Step):
            return (self.__output == other.__output and
                    self.__data == other.__data and
                    self.__children == other.__children)
        else:
            return False

    def __repr__(self):
        return 'Step(<%s>, %r)' % (binascii.hexlify(self.__output).decode('utf8'), self.__data)

    def walk(self):
        """Iterate over every step of the tree, pre-order, depth-first"""
        yield self
        for child in self.__children:
            yield from child.walk()

    def serialize(self, ctx):
        if isinstance(self.__data, Fork):
            for child in self.__children[0:-1]:
                ctx.write_bytes(b'\xff')
                child.serialize(ctx)
            self.__children[-1].serialize(ctx)

        elif isinstance(self.__data, Op):
            self.__data.serialize(ctx)
            self.__children[0].serialize(ctx)

        else:
            ctx.write_bytes(b'\x00')
            self.__data.serialize(ctx)

    @classmethod
    def deserialize(cls, ctx, input_msg, _tag=None, _recursion_limit=256):
        """Deserialize a proof tree

        The serialization format doesn't include the message that the first
        step operates on, so you have to provide it so that operation results
        can be calculated. Results are calculated immediately; an op that
        can't be applied to its input raises DeserializationError.
        """
        if not _recursion_limit:
            raise opentimestamps.core.serialize.RecursionLimitError("Reached timestamp recursion depth limit while deserializing")

        tag = _tag if _tag is not None else ctx.read_bytes(1)

        if tag == b'\x00':
            return cls(input_msg, deserialize_attestation(ctx))

        elif tag == b'\xff':
            branches = []
            next_tag = b'\xff'
            while next_tag == b'\xff':
                branches.append(cls.deserialize(ctx, input_msg, _recursion_limit=_recursion_limit-1))
                next_tag = ctx.read_bytes(1)
            branches.append(cls.deserialize(ctx, input_msg, _tag=next_tag, _recursion_limit=_recursion_limit-1))
            return cls(input_msg, FORK, branches)

        else:
            op = Op.deserialize_from_tag(ctx, tag)

            try:
                result = op(input_msg)
            except MsgValueError as exp:
                raise opentimestamps.core.serialize.DeserializationError("Invalid timestamp; message invalid for op %r: %r" % (op, exp))

            next_step = cls.deserialize(ctx, result, _recursion_limit=_recursion_limit-1)
            return cls(result, op, [next_step])


class DetachedTimestampFile:
    """A file containing a timestamp for another file

    Contains the proof tree, along with a header, the digest type and the digest
    of the file.
    """

    HEADER_MAGIC = b'\x00OpenTimestamps\x00\x00Proof\x00\xbf\x89\xe2\xe8\x84\xe8\x92\x94'
    """Header magic bytes

    Designed to be give the user some information in a hexdump, while being
    identified as 'data' by the file utility.
    """

    MAJOR_VERSION = 1

    def __init__(self, file_hash_op, start_digest, first_step):
        if not isinstance(file_hash_op, CryptOp):
            raise TypeError("file_hash_op must be a CryptOp; got %r" % file_hash_op.__class__)
        elif len(start_digest) != file_hash_op.DIGEST_LENGTH:
            raise ValueError("Start digest length and file_hash_op digest length differ")

        self.file_hash_op = file_hash_op
        self.start_digest = bytes(start_digest)
        self.first_step = first_step

    def __repr__(self):
        return 'DetachedTimestampFile(<%s:%s>)' % (str(self.file_hash_op), binascii.hexlify(self.start_digest).decode('utf8'))

    def __eq__(self, other):
        return (self.__class__ == other.__class__ and
                self.file_hash_op == other.file_hash_op and
                self.start_digest == other.start_digest and
                self.first_step == other.first_step)

    def serialize(self, ctx):
        ctx.write_bytes(self.HEADER_MAGIC)

        ctx.write_varuint(self.MAJOR_VERSION)

        self.file_hash_op.serialize(ctx)
        ctx.write_bytes(self.start_digest)

        self.first_step.serialize(ctx)

    @classmethod
    def deserialize(cls, ctx):
        ctx.assert_magic(cls.HEADER_MAGIC)

        major = ctx.read_varuint()
        if major != cls.MAJOR_VERSION:
            raise opentimestamps.core.serialize.UnsupportedMajorVersion("Version %d detached timestamp files are not supported" % major)

        file_hash_op = CryptOp.deserialize(ctx)
        # CryptOp's tag table also holds OpKECCAK256, which isn't a CryptOp
        if not isinstance(file_hash_op, CryptOp):
            raise opentimestamps.core.serialize.DeserializationError("Unsupported file digest type %s" % str(file_hash_op))

        start_digest = ctx.read_bytes(file_hash_op.DIGEST_LENGTH)
        first_step = Step.deserialize(ctx, start_digest)

        ctx.assert_eof()

        return DetachedTimestampFile(file_hash_op, start_digest, first_step)

    @classmethod
    def from_bytes(cls, buf):
        return cls.deserialize(opentimestamps.core.serialize.BytesDeserializationContext(buf))

    def to_bytes(self):
        """Canonical serialized form"""
        ctx = opentimestamps.core.serialize.BytesSerializationContext()
        self.serialize(ctx)
        return ctx.getbytes()
