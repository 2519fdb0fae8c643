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

import logging
import os
import pathlib

import cryptography.fernet
from cryptography.fernet import Fernet

ENCRYPT_STRING = 'ENC::'
KEY_FILENAME = 'key.txt'

LOGGER = logging.getLogger(__name__)


def set_fernet_key(_data_dir):
    """
    Returns the key stored in the data folder, generating
    and saving a new one when none exists yet.
    """
    key_file = pathlib.Path(_data_dir).joinpath(KEY_FILENAME)
    try:
        with open(key_file, 'rb') as f:
            key = f.read()
    except FileNotFoundError:
        key = Fernet.generate_key()
        os.makedirs(os.path.dirname(key_file), exist_ok=True)
        with open(key_file, 'wb') as f:
            f.write(key)
        LOGGER.debug('Generated new encryption key {}'.format(key_file))
    return key


def is_encrypted(_str):
    return _str is not None and _str.startswith(ENCRYPT_STRING)


def encrypt(clearstr, encrypt_key):
    if clearstr.startswith(ENCRYPT_STRING):
        # already encrypted
        return clearstr
    else:
        f = Fernet(encrypt_key)
        token = f.encrypt(clearstr.encode())
        return ENCRYPT_STRING + token.decode()


def decrypt(enc_str, encrypt_key):
    if enc_str.startswith(ENCRYPT_STRING):
        f = Fernet(encrypt_key)
        try:
            token = f.decrypt(enc_str[len(ENCRYPT_STRING):].encode())
        except cryptography.fernet.InvalidToken:
            # key.txt was regenerated or belongs to another user
            LOGGER.warning('Unable to decrypt string.')
            return None
        return token.decode()
    else:
        return enc_str
