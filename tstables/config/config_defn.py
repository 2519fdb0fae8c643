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

import json
import logging
from importlib import resources

import tstables.common.utils as utils

CONFIG_DEFN_PATH = 'tstables.resources'
CONFIG_DEFN_FILE = 'config_defn.json'
LOGGING_AREA = 'logging'


def load_default_config_defns():
    """ loads the default definition file and
        returns the ConfigDefn object
    """
    return ConfigDefn(CONFIG_DEFN_PATH, CONFIG_DEFN_FILE)


class ConfigDefn:
    """
    Holds the definitions for each setting: type, default
    and allowed values.
    JSON format: [area]['sections'][section]['settings'][setting][metadata]
    section is the section in the ini file
    setting is the name in the ini file
    """

    def __init__(self, _defn_path=None, _defn_file=None):
        self.logger = logging.getLogger(__name__)
        self.config_defn = {}
        self.restricted_items = []
        if _defn_file and _defn_path:
            self.merge_defn_file(_defn_path, _defn_file)

    def merge_defn_file(self, _defn_path, _defn_file):
        json_file = resources.files(_defn_path).joinpath(_defn_file).read_text()
        defn = json.loads(json_file)
        self.merge_defn_dict(defn)

    def merge_defn_dict(self, _defn_dict):
        self.config_defn = utils.merge_dict(self.config_defn, _defn_dict)
        self.update_restricted_items(_defn_dict)

    def get_default_config(self):
        config_defaults = {}
        for area, area_dict in self.config_defn.items():
            defaults_dict = self.get_default_config_area(area, area_dict)
            config_defaults = utils.merge_dict(config_defaults, defaults_dict)
        return config_defaults

    def get_default_config_area(self, _area, _area_dict=None):
        config_defaults = {}
        if _area_dict is None:
            area_dict = self.config_defn[_area]
        else:
            area_dict = _area_dict

        for section, section_data in area_dict['sections'].items():
            if section not in config_defaults:
                config_defaults[section] = {}
            for setting, setting_data in section_data['settings'].items():
                config_defaults[section][setting] = setting_data['default']
        return config_defaults

    def get_logging_sections(self):
        return list(self.config_defn[LOGGING_AREA]['sections'].keys())

    def get_setting(self, _section, _key):
        for area_dict in self.config_defn.values():
            section_data = area_dict['sections'].get(_section)
            if section_data is not None and _key in section_data['settings']:
                return section_data['settings'][_key]
        return None

    def get_type(self, _section, _key):
        """ Returns the expected type of the setting
        """
        setting = self.get_setting(_section, _key)
        if setting is None:
            return None
        return setting['type']

    def validate_list_item(self, _section, _key, _value):
        """ for list settings, will determine if the value
            is in the list
        """
        setting = self.get_setting(_section, _key)
        if setting is None:
            return None
        return _value in setting['values']

    def get_oninit_settings(self):
        """ Returns [section, key, callback name] in definition order
        """
        oninit = []
        for area_dict in self.config_defn.values():
            for section, section_data in area_dict['sections'].items():
                for key, settings in section_data['settings'].items():
                    if 'onInit' in settings:
                        oninit.append([section, key, settings['onInit']])
        return oninit

    def update_restricted_items(self, _defn_dict):
        for area_dict in _defn_dict.values():
            for section, section_data in area_dict['sections'].items():
                for key, settings in section_data['settings'].items():
                    if settings.get('hidden'):
                        self.restricted_items.append([section, key])

    def get_restricted_items(self):
        return self.restricted_items
