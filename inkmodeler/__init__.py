# This file is part of InkModeler.
# Copyright (C) 2024 by the InkModeler Development Team.
#
# This program is free software; you can redistribute it and/or modify
# it under the terms of the GNU General Public License as published by
# the Free Software Foundation; either version 2 of the License, or
# (at your option) any later version.

"""Real-time smoothing and modeling of stylus input strokes"""

from .errors import ModelerError
from .errors import OrderError
from .errors import ParamError
from .errors import SequenceError
from .events import EventType
from .events import RawInput
from .events import Result
from .meta import INKMODELER_VERSION as __version__
from .modeler import StrokeModeler
from .params import KalmanPredictorParams
from .params import ModelerParams
from .params import PredictorKind
