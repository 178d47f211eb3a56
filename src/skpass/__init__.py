"""
SKPass -- a password-store work-alike.

Drives gpg and (optionally) git directly to keep an encrypted
password tree consistent with the recipients declared in .gpg-id files.
"""

import os

__version__ = "0.1.0"
__author__ = "smilinTux"

SKPASS_HOME = os.environ.get("SKPASS_HOME", "~/.skpass")
