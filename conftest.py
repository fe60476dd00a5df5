"""Make ``ride_dispatch_bot`` importable when pytest runs from a checkout."""

import os
import sys

# The package is not required to be installed for the test-suite.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)
