"""
MIT License

Copyright (C) 2026 ROCKY4546
https://github.com/rocky4546

This file is part of TSTables

Permission is hereby granted, free of charge, to any person obtaining a copy of this software
and associated documentation files (the "Software"), to deal in the Software without restriction,
including without limitation the rights to use, copy, modify, merge, publish, distribute,
sublicense, and/or sell copies of the Software, and to permit persons to whom the Software
is furnished to do so, subject to the following conditions:

The above copyright notice and this permission notice shall be included in all copies or
substantial portions of the Software.
"""

import argparse
import logging
import os
import sys

import tstables.common.exceptions as exceptions
import tstables.common.output as output
import tstables.common.utils as utils
import tstables.config.user_config as user_config
import tstables.provision.provisioner as provisioner
import tstables.provision.provisioning_config as provisioning_config
from tstables.common.utils import clean_exit
from tstables.streams.file_source import FileSource
from tstables.tables.parser import TableParser, EVENT_DATA, EVENT_PSIP
from tstables.tables.records import make_table_filter

VARIANT_TABLES = 'tables'
VARIANT_PASSTHROUGH = 'passthrough'

LOGGER = None


def get_config_args(_argv):
    """
    First pass over the command line, only picks up the config file
    so the configuration can decide which commands exist
    """
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument('-c', '--config_file', dest='config_file', type=str, default=None)
    args, _ = parser.parse_known_args(_argv)
    return args


def get_arg_parser(_variant):
    parser = argparse.ArgumentParser(
        prog='tstables',
        description='Decode MPEG-2 transport stream tables and provision users and teams',
        epilog='')
    parser.add_argument('-c', '--config_file', dest='config_file', type=str, default=None,
                        help='config.ini location')
    parser.add_argument('-v', '--version', action='version',
                        version='%(prog)s {}'.format(utils.get_version_str()))
    subparsers = parser.add_subparsers(dest='command', metavar='command')

    if _variant == VARIANT_PASSTHROUGH:
        parse_cmd = subparsers.add_parser(
            'parse', help='print the table id of every section in the pass-through file',
            description='Parses the pass-through file in the current folder and prints '
                        'the table id of each section')
        parse_cmd.set_defaults(func=parse_passthrough)
    else:
        parse_cmd = subparsers.add_parser(
            'parse', help='print the tables found in a stream',
            description='Parses a stream from the streams folder and prints each table')
        parse_cmd.add_argument('stream', help='stream file name in the streams folder')
        parse_cmd.add_argument('-t', '--table', dest='table', type=str, default=None,
                               metavar='tableName', help='only print tables with this name')
        parse_cmd.set_defaults(func=parse_tables)

    install_cmd = subparsers.add_parser(
        'installUsersAndTeams', help='create the configured users and teams',
        description='Loads the users and teams file and provisions them in the backend')
    install_cmd.set_defaults(func=install_users_and_teams)
    return parser


def run_parser(_config, _source, _name, _pass_through, _callback):
    parser = TableParser(_pass_through, _config['parser']['verify_crc'])
    if _pass_through:
        parser.on(EVENT_PSIP, _callback)
    else:
        parser.on(EVENT_DATA, _callback)
    try:
        parser.parse_stream(_source.open_stream(_name))
    except OSError as ex:
        LOGGER.error('Unable to read stream {}: {}'.format(
            _source.get_path(_name), ex.strerror))
        return 1
    except exceptions.MalformedStreamError as ex:
        LOGGER.error('Malformed stream {}: {}'.format(_source.get_path(_name), str(ex)))
        return 1
    return 0


def parse_tables(_config_obj, _args):
    config = _config_obj.data
    LOGGER.info('Parsing stream {} table filter {}'.format(_args.stream, _args.table))
    source = FileSource(config['paths']['streams_dir'], config['parser']['chunk_size'])
    is_selected = make_table_filter(_args.table)

    def print_record(_record):
        if is_selected(_record):
            output.print_table_record(_record)

    return run_parser(config, source, _args.stream, False, print_record)


def parse_passthrough(_config_obj, _args):
    config = _config_obj.data
    name = config['parser']['passthrough_file']
    LOGGER.info('Parsing {} in pass-through mode'.format(name))
    source = FileSource(os.getcwd(), config['parser']['chunk_size'])
    return run_parser(config, source, name, True, output.print_table_id)


def install_users_and_teams(_config_obj, _args):
    config = _config_obj.data
    try:
        if config['provisioning']['backend'] == 'http':
            _config_obj.load_encrypted_settings()
        prov_config = provisioning_config.load_provisioning_config(
            config['provisioning']['config_file'])
        task = provisioner.ProvisionTask(
            provisioner.get_provisioner(config), prov_config)
        task.start()
        result = task.wait()
    except exceptions.ProvisioningError as ex:
        LOGGER.error('Provisioning failed: {}'.format(str(ex)))
        print('Provisioning failed: {}'.format(str(ex)), file=sys.stderr)
        return 1
    except Exception as ex:
        LOGGER.exception('Provisioning failed: {}'.format(str(ex)))
        print('Provisioning failed: {}'.format(str(ex)), file=sys.stderr)
        return 1
    LOGGER.notice(str(result))
    return 0


def main(script_dir, argv=None):
    """ main startup method for app """
    global LOGGER
    config_args = get_config_args(argv)
    try:
        config_obj = user_config.get_config(script_dir, config_args)
    except exceptions.ConfigError as ex:
        print('Configuration error: {}'.format(str(ex)), file=sys.stderr)
        clean_exit(1)
    config = config_obj.data
    LOGGER = logging.getLogger(__name__)

    arg_parser = get_arg_parser(config['parser']['variant'])
    args = arg_parser.parse_args(argv)
    if args.command is None:
        arg_parser.print_usage(sys.stderr)
        clean_exit(2)

    LOGGER.debug('Initiating TSTables v{} command {}'.format(
        utils.get_version_str(), args.command))
    LOGGER.debug('Settings: {}'.format(config_obj.filter_config_data()))
    try:
        exit_code = args.func(config_obj, args)
    except KeyboardInterrupt:
        LOGGER.warning('^C received, stopping')
        exit_code = 1
    clean_exit(exit_code)


def console_main():
    main(os.getcwd())
