#!/usr/bin/env python3

import pytest
import parametrize_from_file

from pyglycoensemble.alignment import *
from pyglycoensemble.errors import UnsupportedTopologyError
from voluptuous import Schema, Optional, Coerce

@parametrize_from_file(
        schema=Schema({
            'ali': str,
            Optional('query_prefix', default=QUERY_PREFIX): str,
            'aa_count': Coerce(int),
            'slash_count': Coerce(int),
            'first_chain_length': Coerce(int),
        }),
)
def test_analyze_alignment(ali, query_prefix, aa_count, slash_count, first_chain_length):
    lines = ali.splitlines(keepends=True)
    assert analyze_alignment(lines, query_prefix) == (aa_count, slash_count, first_chain_length)

@pytest.mark.parametrize(
        'slash_count, expected', [
            (2, 3),
            (5, 6),
        ],
)
def test_determine_chain_length(slash_count, expected):
    assert determine_chain_length(slash_count) == expected

@pytest.mark.parametrize('slash_count', [0, 1, 3, 4, 6])
def test_determine_chain_length_err(slash_count):
    with pytest.raises(UnsupportedTopologyError, match=str(slash_count)):
        determine_chain_length(slash_count)

def test_process_alignment(tmp_path):
    path = tmp_path / 'align.ali'
    path.write_text('''\
>P1;pm.pdb
sequence:pm.pdb:     :     :     :     : : : :
AAAAA/BBBB
B/CCCCC/DD
DDD/EEEEE/FFFFF*
''')
    params = process_alignment(path)

    assert params.aa_count == 30
    assert params.slash_count == 5
    assert params.chain_len == 6
    assert params.first_chain_length == 5
    assert params.first_chain_len_plus_one == 6

def test_process_alignment_err(tmp_path):
    path = tmp_path / 'align.ali'
    path.write_text('>P1;pm.pdb\nsequence:pm.pdb::::::::\nAAA/BBB/CCC/DDD/EEE*\n')

    with pytest.raises(UnsupportedTopologyError):
        process_alignment(path)
