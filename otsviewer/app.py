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

"""Web front-end: upload, view and download timestamp proofs"""

import logging

from flask import Flask, Response, redirect, render_template, request

from opentimestamps.core.serialize import DeserializationError

from otsviewer.cache import ProofCache
from otsviewer.core.timestamp import DetachedTimestampFile
from otsviewer.identity import doc_id
from otsviewer.render import display_timestamp

DEFAULT_MAX_UPLOAD = 1024 * 1024

def error_page(title, error, status):
    return render_template('error.html', title=title, error=error), status

def create_app(cache_path, max_upload=DEFAULT_MAX_UPLOAD):
    app = Flask(__name__)
    app.config['MAX_CONTENT_LENGTH'] = max_upload
    app.config['PROOF_CACHE'] = ProofCache(cache_path)

    def cache():
        return app.config['PROOF_CACHE']

    @app.route('/')
    def index():
        return render_template('index.html', title='OpenTimestamps Viewer')

    @app.route('/upload', methods=['POST'])
    def upload():
        uploaded = request.files.get('file')
        if uploaded is None:
            logging.info("No file provided.")
            return redirect('/')

        try:
            detached_timestamp = DetachedTimestampFile.from_bytes(uploaded.read())
        except DeserializationError as exp:
            logging.info("Failed to parse timestamp: %s" % exp)
            return error_page('Upload Timestamp', str(exp), 400)

        proof_id = doc_id(detached_timestamp)
        try:
            cache().put(proof_id, detached_timestamp.to_bytes())
        except OSError as exp:
            logging.error("Failed to write timestamp %s: %s" % (proof_id, exp))
            return redirect('/')

        logging.info("Stored timestamp %s" % proof_id)
        return redirect('/view/%s' % proof_id)

    @app.route('/view/<proof_id>')
    def view(proof_id):
        serialized = cache().get(proof_id)
        if serialized is None:
            return error_page('View Timestamp', 'No timestamp with id %s' % proof_id, 404)

        try:
            detached_timestamp = DetachedTimestampFile.from_bytes(serialized)
        except DeserializationError as exp:
            logging.error("Cached timestamp %s is invalid: %s" % (proof_id, exp))
            return error_page('View Timestamp', str(exp), 422)

        displayed = display_timestamp(detached_timestamp)
        return render_template('entry.html', title=displayed.title, timestamp=displayed)

    @app.route('/download/<proof_id>')
    def download(proof_id):
        if not cache().exists(proof_id):
            return error_page('Download Timestamp', 'No timestamp with id %s' % proof_id, 404)

        return Response(cache()[proof_id],
                        mimetype='application/octet-stream',
                        headers={'Content-Disposition': 'attachment; filename=%s.ots' % proof_id})

    return app
