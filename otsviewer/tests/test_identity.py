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

import hashlib
import unittest

from opentimestamps.core.notary import PendingAttestation, BitcoinBlockHeaderAttestation
from opentimestamps.core.op import OpAppend, OpSHA256
from otsviewer.core.timestamp import DetachedTimestampFile, Step, FORK
from otsviewer.identity import doc_id, proof_id

EMPTY_SHA256 = bytes.fromhex('e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855')

SERIALIZED = (b'\x00OpenTimestamps\x00\x00Proof\x00\xbf\x89\xe2\xe8\x84\xe8\x92\x94' + b'\x01' +
              b'\x08' + EMPTY_SHA256 +
              b'\xf0\x03abc' + b'\x08' +
              b'\x00' + bytes.fromhex('83dfe30d2ef90c8e' + '07' + '06') + b'foobar')

class Test_proof_id(unittest.TestCase):
    def test_known_value(self):
        """Hash of the start digest followed by every step output"""
        appended = EMPTY_SHA256 + b'abc'
        digest = hashlib.sha256(appended).digest()

        expected = hashlib.sha256(EMPTY_SHA256 + appended + digest + digest).hexdigest()

        detached = DetachedTimestampFile.from_bytes(SERIALIZED)
        self.assertEqual(doc_id(detached), expected)

    def test_reproducible(self):
        """Decoding the same bytes twice gives the same id"""
        self.assertEqual(doc_id(DetachedTimestampFile.from_bytes(SERIALIZED)),
                         doc_id(DetachedTimestampFile.from_bytes(SERIALIZED)))

    def test_deterministic(self):
        """Same tree, same id"""
        leaf = Step(b'msg', PendingAttestation('foobar'))
        step = Step(b'msg', FORK, [leaf, Step(b'msg', BitcoinBlockHeaderAttestation(1))])
        self.assertEqual(proof_id(b'msg', step), proof_id(b'msg', step))
        self.assertEqual(len(proof_id(b'msg', step)), 64)

    def test_different_trees(self):
        """Different outputs or start digests give different ids"""
        a = Step(b'msgabc', OpAppend(b'abc'), [Step(b'msgabc', PendingAttestation('foobar'))])
        b = Step(b'msgabd', OpAppend(b'abd'), [Step(b'msgabd', PendingAttestation('foobar'))])

        self.assertNotEqual(proof_id(b'msg', a), proof_id(b'msg', b))
        self.assertNotEqual(proof_id(b'msg', a), proof_id(b'msh', a))

    def test_traversal_order(self):
        """Branch order is part of the id"""
        x = Step(b'x', PendingAttestation('x'))
        y = Step(b'y', PendingAttestation('y'))
        self.assertNotEqual(proof_id(b'm', Step(b'm', FORK, [x, y])),
                            proof_id(b'm', Step(b'm', FORK, [y, x])))

    def test_canonical_bytes_same_id(self):
        """Re-serialized proofs keep their id"""
        detached = DetachedTimestampFile.from_bytes(SERIALIZED)
        self.assertEqual(doc_id(DetachedTimestampFile.from_bytes(detached.to_bytes())), doc_id(detached))
        self.assertEqual(detached.to_bytes(), SERIALIZED)
