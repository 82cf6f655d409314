# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Modeler params in JSON settings files"""

## Imports

import json
import logging

from .params import ModelerParams

logger = logging.getLogger(__name__)


## Public functions

def get_json_config(path):
    """Return the settings mapping read from a JSON file

    :param str path: Path to the settings file
    :returns: Dict with settings, or the empty dict if the file cannot
      be read or parsed.
    :rtype: dict

    """
    logger.debug("Reading modeler settings from %r", path)
    try:
        with open(path, "rb") as fp:
            settings = json.loads(fp.read().decode("utf-8"))
    except OSError:
        logger.warning("Failed to load settings file: %s", path)
    except ValueError as e:
        logger.warning("%s: %s", path, str(e))
    else:
        if isinstance(settings, dict):
            return settings
        logger.warning("%s: expected a JSON object, got %s",
                       path, type(settings).__name__)
    logger.warning("Failed to load modeler settings: using defaults")
    return {}


def load_params(path):
    """Load validated ModelerParams from a JSON settings file

    Keys missing from the file take their suggested values. If the file
    can't be read at all, the suggested params are returned.

    :param str path: Path to the settings file
    :rtype: ModelerParams
    :raises ParamError: if the file holds invalid values

    """
    return ModelerParams.from_dict(get_json_config(path)).validate()


def save_params(params, path):
    """Write params to a JSON settings file, as UTF-8"""
    logger.debug("Writing modeler settings to %r", path)
    json_data = json.dumps(params.to_dict(), indent=2, sort_keys=True)
    with open(path, "wb") as fp:
        fp.write(json_data.encode("utf-8"))
