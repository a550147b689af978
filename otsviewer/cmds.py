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
import re
import sys

from opentimestamps.core.serialize import BadMagicError, DeserializationError, StreamDeserializationContext

from otsviewer.cache import CacheVersionError
from otsviewer.core.timestamp import DetachedTimestampFile
from otsviewer.render import display_timestamp

import otsviewer.app

MARKUP_RE = re.compile(r'<[^>]*>')

def strip_markup(s):
    return MARKUP_RE.sub('', s)

def serve_command(args):
    try:
        app = otsviewer.app.create_app(args.cache_path, max_upload=args.max_upload)
    except (CacheVersionError, OSError) as exp:
        logging.error("Could not open proof cache %r: %s" % (args.cache_path, exp))
        sys.exit(1)

    logging.info("Serving proofs from %s on http://%s:%d/" % (args.cache_path, args.host, args.port))
    app.run(host=args.host, port=args.port)

def info_command(args):
    ctx = StreamDeserializationContext(args.file)
    try:
        detached_timestamp = DetachedTimestampFile.deserialize(ctx)
    except BadMagicError:
        logging.error("Error! %r is not a timestamp file." % args.file.name)
        sys.exit(1)
    except DeserializationError as exp:
        logging.error("Invalid timestamp file %r: %s" % (args.file.name, exp))
        sys.exit(1)

    displayed = display_timestamp(detached_timestamp)

    print("Id: %s" % displayed.id)
    print("File %s hash: %s" % (displayed.digest_type, displayed.start_hash))
    print("Steps:")
    for step in displayed.steps:
        print("%s%s: %s" % (step.prefix, step.reason, strip_markup(step.result)))
