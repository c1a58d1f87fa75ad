"""
BuildID: read an application's build identity from its package archive.

The build identity is the digest recorded for the compiled code bundle in the
archive's signed manifest. It identifies a particular build of an app without
verifying any signature.
"""

__version__ = "1.0.0"
__author__ = "BuildID Team"
