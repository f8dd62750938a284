# tests/conftest.py
import os
import sys

# project root on sys.path so `zipsplit` and `tests.helpers` import without install
ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if ROOT not in sys.path:
    sys.path.insert(0, ROOT)
