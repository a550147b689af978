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

import io
import tempfile
import unittest
from unittest import mock

from otsviewer.app import create_app
from otsviewer.core.timestamp import DetachedTimestampFile
from otsviewer.identity import doc_id

EMPTY_SHA256 = bytes.fromhex('e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855')

SERIALIZED = (b'\x00OpenTimestamps\x00\x00Proof\x00\xbf\x89\xe2\xe8\x84\xe8\x92\x94' + b'\x01' +
              b'\x08' + EMPTY_SHA256 +
              b'\xff' + b'\x00' + bytes.fromhex('83dfe30d2ef90c8e' + '07' + '06') + b'foobar' +
              b'\x08' + b'\x00' + bytes.fromhex('0588960d73d71901' + '03' + 'a0c21e'))

class Test_app(unittest.TestCase):
    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.app = create_app(self.tmpdir.name)
        self.client = self.app.test_client()
        self.proof_id = doc_id(DetachedTimestampFile.from_bytes(SERIALIZED))

    def tearDown(self):
        self.tmpdir.cleanup()

    def upload(self, data):
        return self.client.post('/upload',
                                data={'file': (io.BytesIO(data), 'proof.ots')},
                                content_type='multipart/form-data')

    def test_index(self):
        r = self.client.get('/')
        self.assertEqual(r.status_code, 200)
        self.assertIn(b'enctype="multipart/form-data"', r.data)

    def test_upload_and_view(self):
        """Uploading redirects to the rendered proof"""
        r = self.upload(SERIALIZED)
        self.assertEqual(r.status_code, 302)
        self.assertTrue(r.headers['Location'].endswith('/view/%s' % self.proof_id))

        r = self.client.get('/view/%s' % self.proof_id)
        self.assertEqual(r.status_code, 200)
        self.assertIn(b'Fork into <b>2</b> paths', r.data)
        self.assertIn(b'Pending attestation: server <b>foobar</b>', r.data)
        self.assertIn(b'of Bitcoin block <b>500000</b>', r.data)
        self.assertIn(b'Timestamp of <tt>e3b0c44298fc</tt>', r.data)

    def test_upload_twice(self):
        """Uploading the same proof twice names it the same"""
        first = self.upload(SERIALIZED).headers['Location']
        second = self.upload(SERIALIZED).headers['Location']
        self.assertEqual(first, second)

    def test_download(self):
        """Downloads return the canonical bytes"""
        self.upload(SERIALIZED)
        r = self.client.get('/download/%s' % self.proof_id)
        self.assertEqual(r.status_code, 200)
        self.assertEqual(r.mimetype, 'application/octet-stream')
        self.assertEqual(r.data, SERIALIZED)

    def test_unknown_id(self):
        """Unknown ids are not found"""
        for url in ('/view/%s' % self.proof_id, '/download/%s' % self.proof_id, '/view/not-an-id'):
            r = self.client.get(url)
            self.assertEqual(r.status_code, 404)

    def test_upload_invalid(self):
        """Undecodable uploads show the reason and aren't cached"""
        r = self.upload(b'not a timestamp')
        self.assertEqual(r.status_code, 400)
        self.assertIn(b'Expected magic bytes', r.data)

        r = self.upload(SERIALIZED + b'trailing')
        self.assertEqual(r.status_code, 400)
        self.assertIn(b'Trailing garbage', r.data)

        self.assertFalse(self.app.config['PROOF_CACHE'].exists(self.proof_id))

    def test_upload_without_file(self):
        r = self.client.post('/upload', data={}, content_type='multipart/form-data')
        self.assertEqual(r.status_code, 302)
        self.assertTrue(r.headers['Location'].endswith('/'))

    def test_upload_write_failure(self):
        """Cache write failures send the user back to the index"""
        with mock.patch.object(self.app.config['PROOF_CACHE'], 'put', side_effect=OSError("disk full")):
            r = self.upload(SERIALIZED)

        self.assertEqual(r.status_code, 302)
        self.assertFalse(r.headers['Location'].endswith(self.proof_id))
        self.assertFalse(self.app.config['PROOF_CACHE'].exists(self.proof_id))
