# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Project meta-information.

InkModeler uses `Semantic Versioning`_ for its version strings:

    ``MAJOR.MINOR.PATCH[-PREREL]``

Prerelease phases are marked in the code itself with a "-alpha",
"-beta" or "-rc" suffix. Final releases carry no suffix.

.. _Semantic Versioning: http://semver.org/
"""

#: Base version string
#: Used by setup.py, so it must stay a single simple assignment.

INKMODELER_VERSION = '0.9.0-beta'
