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

import copy
import configparser
import logging
import os
import pathlib

import tstables.common.exceptions as exceptions
import tstables.common.utils as utils
import tstables.config.config_callbacks as config_callbacks
import tstables.config.config_defn as config_defn

CONFIG_FILENAME = 'config.ini'


def get_config(base_dir, args=None):
    return TSTablesConfig(base_dir, args)


class TSTablesConfig:
    """
    Settings from config.ini layered over the defaults in
    the definition file.  data is a dict of sections, each a dict
    of typed values.
    """

    def __init__(self, _base_dir=None, _args=None):
        self.logger = logging.getLogger(__name__)
        self.base_dir = str(_base_dir or os.getcwd())
        self.config_handler = configparser.ConfigParser(interpolation=None)
        self.defn_json = config_defn.load_default_config_defns()
        self.data = self.defn_json.get_default_config()
        self.init_logger_config()
        config_file = TSTablesConfig.get_config_path(self.base_dir, _args)
        if config_file is not None:
            self.import_config(config_file)
        else:
            utils.logging_setup(self.config_handler)
            self.logger.info('No {} found, using default settings'.format(CONFIG_FILENAME))
        self.call_oninit()

    def init_logger_config(self):
        """
        Loads the default logging sections into the handler so
        fileConfig has a complete set even when config.ini has none
        """
        defaults = self.data
        for section in self.defn_json.get_logging_sections():
            try:
                self.config_handler.add_section(section)
            except configparser.DuplicateSectionError:
                pass
            for key, value in defaults[section].items():
                self.config_handler.set(section, key, str(value))

    def import_config(self, config_file):
        try:
            with open(config_file, 'r') as f:
                self.config_handler.read_file(f)
        except configparser.Error as e:
            raise exceptions.ConfigError(
                'Unable to read config file {}: {}'.format(config_file, str(e)))
        self.data['paths']['config_file'] = str(config_file)
        utils.logging_setup(self.config_handler)
        self.logger.info('Loading Configuration File: {}'.format(config_file))

        for each_section in self.config_handler.sections():
            lower_section = each_section.lower()
            if lower_section not in self.data.keys():
                self.data.update({lower_section: {}})
            for (each_key, each_val) in self.config_handler.items(each_section):
                lower_key = each_key.lower()
                self.data[lower_section][lower_key] = \
                    self.fix_value_type(lower_section, lower_key, each_val)

    def call_oninit(self):
        for section, key, func_name in self.defn_json.get_oninit_settings():
            config_callbacks.call_function(func_name, section, key, self)

    def load_encrypted_settings(self):
        """
        Decrypts the hidden settings.  Clear text values are encrypted
        in config.ini, so only call this when the value is needed
        """
        for section, key in self.defn_json.get_restricted_items():
            config_callbacks.load_encrypted_setting(self, section, key)

    @staticmethod
    def get_config_path(_base_dir, args=None):
        """
        Returns the config.ini to use.  An explicit file that does
        not exist is an error; otherwise None means use the defaults.
        """
        if args is not None and getattr(args, 'config_file', None):
            config_file = pathlib.Path(str(args.config_file))
            if not config_file.is_file():
                raise exceptions.ConfigError(
                    'Config file missing {}'.format(config_file))
            return config_file
        for x in [CONFIG_FILENAME, 'data/' + CONFIG_FILENAME]:
            poss_config = pathlib.Path(_base_dir).joinpath(x)
            if poss_config.is_file():
                return poss_config
        return None

    def fix_value_type(self, _section, _key, _value):
        val_type = self.defn_json.get_type(_section, _key)
        try:
            if val_type == 'boolean':
                return self.config_handler.getboolean(_section, _key)
            elif val_type == 'list':
                if not self.defn_json.validate_list_item(_section, _key, _value):
                    raise exceptions.ConfigError(
                        'INVALID VALUE ({}) FOR CONFIG ITEM [{}][{}]'
                        .format(_value, _section, _key))
                return _value
            elif val_type == 'integer':
                return int(_value)
            elif val_type == 'float':
                return float(_value)
            elif _value == '':
                return None
            else:
                return _value
        except ValueError:
            raise exceptions.ConfigError(
                'INVALID {} VALUE ({}) FOR CONFIG ITEM [{}][{}]'
                .format(val_type, _value, _section, _key))

    def filter_config_data(self):
        """ removes sensitive data from config and returns a copy """
        filtered_config = copy.deepcopy(self.data)
        for section, key in self.defn_json.get_restricted_items():
            filtered_config[section].pop(key, None)
        return filtered_config

    def write(self, _section, _key, _value):
        self.data[_section][_key] = _value
        try:
            self.config_handler.set(_section, _key, _value)
        except configparser.NoSectionError:
            self.config_handler.add_section(_section)
            self.config_handler.set(_section, _key, _value)
        with open(self.data['paths']['config_file'], 'w') as config_file:
            self.config_handler.write(config_file)
