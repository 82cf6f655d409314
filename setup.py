# This file is part of InkModeler.

# Imports:

import os.path
import re

from setuptools import setup


# Helper routines:

def get_version():
    """Returns the base version string from inkmodeler/meta.py

    The module isn't imported, so that setup.py works before numpy is
    installed.

    """
    meta_path = os.path.join(os.path.dirname(__file__),
                             "inkmodeler", "meta.py")
    with open(meta_path, "rb") as fp:
        meta_src = fp.read().decode("utf-8")
    match = re.search(r"^INKMODELER_VERSION\s*=\s*'([^']+)'",
                      meta_src, re.MULTILINE)
    if not match:
        raise RuntimeError("No INKMODELER_VERSION in %s" % (meta_path,))
    return match.group(1)


# Setup script "main()":

setup(
    name='InkModeler',
    version=get_version(),
    description='Real-time smoothing and modeling of stylus input strokes.',
    author='The InkModeler Development Team',
    license="GPLv2+",
    python_requires=">=3.6",

    packages=['inkmodeler'],
    install_requires=[
        'numpy',
    ],
    test_suite='tests',
)
