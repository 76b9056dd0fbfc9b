"""Envbee SDK Meta information.
   Envbee SDK retrieves and decrypts secure variables from the envbee API.
"""
__title__ = 'envbee_sdk'
__description__ = (
   'Envbee SDK retrieves, authenticates and decrypts secure variables '
   'from the envbee API, with local cache fallback.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2025 envbee'
__author__ = 'envbee'
__author_email__ = 'info@envbee.dev'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/envbee/envbee-python-sdk'
