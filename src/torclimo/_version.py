r"""Specify torclimo version."""

def get_version():
    r"""Get the latest version of torclimo."""

    try:
        from setuptools_scm import get_version
        return get_version(root='../..', relative_to=__file__,
                           version_scheme='post-release', local_scheme='dirty-tag')
    except (ImportError, LookupError):
        from importlib.metadata import version
        return version(__package__)
