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

"""Content-derived names for proofs"""

import hashlib

from bitcoin.core import b2x

def proof_id(start_digest, first_step):
    """Compute a unique name for a proof tree

    SHA256 over the start digest followed by the output of every step, in the
    same pre-order as the rendered steps. Returned hex-encoded.
    """
    hasher = hashlib.sha256()
    hasher.update(start_digest)
    for step in first_step.walk():
        hasher.update(step.output)
    return b2x(hasher.digest())

def doc_id(detached_timestamp):
    """Name of a detached timestamp file, for the cache and URLs"""
    return proof_id(detached_timestamp.start_digest, detached_timestamp.first_step)
