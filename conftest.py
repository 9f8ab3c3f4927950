"""
Pytest configuration and fixtures.
"""

import os
import sys

# Add app directory to path
sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

# Set test environment
os.environ["TESTING"] = "1"

import pytest

from cty_parser import parse


# Excerpt in the real cty.dat layout
SAMPLE_CTY = (
    "Singapore:                28:  54:  AS:    1.30:  -103.80:    -8.0:  9V:\n"
    "    9V,S6,=9V1XYZ(27)[53],=9V1LL<1.50/-104.00>;\n"
    "Fed. Rep. of Germany:     14:  28:  EU:   51.00:   -10.00:    -1.0:  DL:\n"
    "    DA,DB,DC,DD,DE,DF,DG,DH,DI,DJ,DK,DL,DM,DN,DO,DP,DQ,DR,Y2,Y3,Y4,Y5,\n"
    "    Y6,Y7,Y8,Y9;\n"
    "Scarborough Reef:         27:  50:  AS:   15.08:  -117.72:    -8.0:  BS7:\n"
    "    BS7,=BS7H;\n"
    "China:                    24:  44:  AS:   36.00:  -102.00:    -8.0:  BY:\n"
    "    3H,3H0(23)[42],BS,BY,=BS7HQ;\n"
    "Canada:                   05:  09:  NA:   44.35:    78.75:     5.0:  VE:\n"
    "    CF,VE,VA3(4)[4],=VER20240605,=VE3EXACT{EU}<50.00/-10.00>~-1.0~;\n"
    "European Turkey:          20:  39:  EU:   41.02:   -28.97:    -2.0:  *TA1:\n"
    "    =TA1C,=TA1D;\n"
)


@pytest.fixture
def sample_cty_text():
    """Raw text of a small country file."""
    return SAMPLE_CTY


@pytest.fixture
def sample_table():
    """Parsed table built from the sample country file."""
    return parse(SAMPLE_CTY)
