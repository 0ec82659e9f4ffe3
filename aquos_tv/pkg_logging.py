# Copyright (c) 2023 Samuel J. McKelvie
#
# MIT License - See LICENSE file accompanying this package.
#

"""Package-wide logger for aquos_tv"""

import logging

logger = logging.getLogger('aquos_tv')
