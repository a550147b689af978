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

"""Proof format and proof tree

Everything under otsviewer.core decides what a proof file means: how it is
decoded, what every step computes, and therefore the proof ids that name
cached proofs. Changes here can silently rename every cached proof, so pay
extra attention when making them.
"""
