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

import argparse
import os

import appdirs

import otsviewer
import otsviewer.app
import otsviewer.cmds

DEFAULT_CACHE_PATH = appdirs.user_cache_dir('ots-viewer')

def make_common_options_arg_parser():
    parser = argparse.ArgumentParser(description="OpenTimestamps proof viewer.")
    parser.add_argument('--version', action='version', version='v%s' % otsviewer.__version__)

    parser.add_argument("-q", "--quiet", action="count", default=0,
                        help="Be more quiet.")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Be more verbose. Both -v and -q may be used multiple times.")

    parser.add_argument("--cache", action="store", type=str,
                        dest='cache_path',
                        default=DEFAULT_CACHE_PATH,
                        help="Location of the proof cache. Default: %(default)s")

    return parser

def handle_common_options(args, parser):
    args.parser = parser
    args.verbosity = args.verbose - args.quiet
    args.cache_path = os.path.normpath(os.path.expanduser(args.cache_path))
    return args

def parse_viewer_args(raw_args):
    parser = make_common_options_arg_parser()

    subparsers = parser.add_subparsers(title='Subcommands',
                                       description='All operations are done through subcommands:')

    # ----- serve -----
    parser_serve = subparsers.add_parser('serve', aliases=['s'],
                                         help='Run the web viewer')
    parser_serve.add_argument('--host', type=str, default='127.0.0.1',
                              help='Address to listen on. Default: %(default)s')
    parser_serve.add_argument('--port', type=int, default=8000,
                              help='Port to listen on. Default: %(default)d')
    parser_serve.add_argument('--max-upload', type=int, default=otsviewer.app.DEFAULT_MAX_UPLOAD,
                              help='Largest proof accepted for upload, in bytes. Default: %(default)d')

    # ----- info -----
    parser_info = subparsers.add_parser('info', aliases=['i'],
                                        help='Show the steps of a timestamp')
    parser_info.add_argument('file', metavar='FILE', type=argparse.FileType('rb'),
                             help='Filename')

    parser_serve.set_defaults(cmd_func=otsviewer.cmds.serve_command)
    parser_info.set_defaults(cmd_func=otsviewer.cmds.info_command)

    args = parser.parse_args(raw_args)
    args = handle_common_options(args, parser)

    return args
