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

import logging
import os
import re
import tempfile

class CacheVersionError(Exception):
    """Cache directory was written by an incompatible version"""

class ProofCache:
    """Persistant content-addressed cache of serialized proofs

    Entries are keyed by the proof id (see otsviewer.identity) and are never
    modified once written. Since the id is derived from the proof itself,
    writing the same id twice writes the same bytes twice.
    """

    VALID_ID_RE = re.compile(r'\A[0-9a-f]{64}\Z')

    def __init__(self, path):
        self.path = path

        # Simple version scheme
        try:
            with open(os.path.join(self.path, 'version'), 'r') as fd:
                try:
                    major, minor = fd.read().strip().split('.')
                    major = int(major)
                    minor = int(minor)
                except ValueError:
                    raise CacheVersionError("Unknown proof cache version")
                if major != 1:
                    raise CacheVersionError("Unsupported proof cache version %d.%d" % (major, minor))

        except FileNotFoundError:
            logging.debug("Creating proof cache in %s" % self.path)
            os.makedirs(self.path, exist_ok=True)
            with open(os.path.join(self.path, 'version'), 'w') as fd:
                fd.write('%d.%d\n' % (1,0))

    def is_valid_id(self, proof_id):
        return isinstance(proof_id, str) and self.VALID_ID_RE.match(proof_id) is not None

    def __id_to_filename(self, proof_id):
        return os.path.join(self.path, proof_id)

    def __contains__(self, proof_id):
        return self.exists(proof_id)

    def __getitem__(self, proof_id):
        if not self.is_valid_id(proof_id):
            raise KeyError(proof_id)

        try:
            with open(self.__id_to_filename(proof_id), 'rb') as proof_fd:
                return proof_fd.read()
        except FileNotFoundError:
            raise KeyError(proof_id)

    def exists(self, proof_id):
        """Check for an entry without reading it"""
        return self.is_valid_id(proof_id) and os.path.isfile(self.__id_to_filename(proof_id))

    def get(self, proof_id):
        """Get the serialized proof, or None if there isn't one"""
        try:
            return self[proof_id]
        except KeyError:
            return None

    def put(self, proof_id, serialized_proof):
        """Save a serialized proof

        The entry is written to a temporary file in the cache directory and
        renamed into place, so concurrent readers either see the whole entry or
        nothing. Raises OSError on failure, leaving no entry behind.
        """
        if not self.is_valid_id(proof_id):
            raise ValueError("Invalid proof id %r" % proof_id)

        fd, tmp_path = tempfile.mkstemp(dir=self.path, prefix='.tmp-')
        try:
            with os.fdopen(fd, 'wb') as tmp_fd:
                tmp_fd.write(serialized_proof)
                tmp_fd.flush()
                os.fsync(tmp_fd.fileno())
            os.replace(tmp_path, self.__id_to_filename(proof_id))
        except BaseException:
            try:
                os.unlink(tmp_path)
            except FileNotFoundError:
                pass
            raise

        logging.debug("Saved proof %s" % proof_id)
