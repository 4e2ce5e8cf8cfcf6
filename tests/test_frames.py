"""Tests for DataFrame materialisation of records."""

import numpy as np
import pandas as pd
import pytest

from mztabcols.core.errors import MalformedCell, UnboundSection
from mztabcols.core.record import Record
from mztabcols.core.values import MISSING
from mztabcols.io import frame_to_records, records_to_frame

from conftest import PEPTIDE_HEADERS


@pytest.fixture
def peptide_records(peptide_registry, runs):
    first = Record(peptide_registry, runs)
    first.set_value('sequence', 'PEPTIDER')
    first.set_value('charge', 2)
    first.set_value('mass_to_charge', 449.7)
    first.append('retention_time', 10.5)
    first.append('retention_time', 11.0)
    first.set_text('modifications', '3-UNIMOD:35')
    first.set_text('spectra_ref', 'ms_run[2]:scan=9')

    second = Record(peptide_registry, runs)
    second.set_value('sequence', 'AAK')
    second.set_value('unique', False)
    return [first, second]


class TestRecordsToFrame:
    """Tabulation."""

    def test_columns_follow_registry(self, peptide_records):
        frame = records_to_frame(peptide_records)
        assert list(frame.columns) == PEPTIDE_HEADERS
        assert len(frame) == 2

    def test_numeric_columns(self, peptide_records):
        frame = records_to_frame(peptide_records)
        assert frame['charge'].dtype == 'Float64'
        assert frame['charge'].iloc[0] == 2.0
        assert frame['charge'].iloc[1] is pd.NA
        assert frame['charge'].mean() == 2.0
        assert frame['mass_to_charge'].iloc[0] == pytest.approx(449.7)

    def test_text_columns(self, peptide_records):
        frame = records_to_frame(peptide_records)
        assert frame['retention_time'].iloc[0] == '10.5|11.0'
        assert frame['modifications'].iloc[0] == '3-UNIMOD:35'
        assert frame['unique'].iloc[1] == '0'
        assert frame['accession'].iloc[0] is None

    def test_empty_needs_registry(self, peptide_registry):
        with pytest.raises(ValueError, match="empty"):
            records_to_frame([])
        frame = records_to_frame([], peptide_registry)
        assert list(frame.columns) == PEPTIDE_HEADERS
        assert frame.empty

    def test_mixed_registries(self, peptide_registry, psm_registry):
        with pytest.raises(ValueError, match="same registry"):
            records_to_frame([Record(peptide_registry), Record(psm_registry)])


class TestFrameToRecords:
    """Rebuilding records from a frame."""

    def test_round_trip(self, peptide_registry, peptide_records, runs):
        frame = records_to_frame(peptide_records)
        restored, errors = frame_to_records(peptide_registry, frame, runs)
        assert errors == []
        assert [r.render() for r in restored] == [r.render() for r in peptide_records]
        assert restored[0].get_value('charge') == 2

    def test_nan_value_is_not_missing(self, peptide_registry):
        stored = Record(peptide_registry)
        stored.set_value('mass_to_charge', float('nan'))
        assert stored.get_text('mass_to_charge') == 'NaN'
        frame = records_to_frame([stored, Record(peptide_registry)])
        assert np.isnan(frame['mass_to_charge'].iloc[0])
        assert frame['mass_to_charge'].iloc[1] is pd.NA

        (restored, empty), errors = frame_to_records(peptide_registry, frame)
        assert errors == []
        assert restored.get_text('mass_to_charge') == 'NaN'
        assert empty.get_value('mass_to_charge') is MISSING

    def test_plain_float_nan_is_missing(self, peptide_registry):
        frame = pd.DataFrame({'mass_to_charge': [np.nan, 512.25]})
        records, errors = frame_to_records(peptide_registry, frame)
        assert errors == []
        assert records[0].get_value('mass_to_charge') is MISSING
        assert records[1].get_value('mass_to_charge') == 512.25

    def test_partial_frame(self, peptide_registry):
        frame = pd.DataFrame({'Sequence': ['AAK'], 'charge': [3.0]})
        (record,), errors = frame_to_records(peptide_registry, frame)
        assert errors == []
        assert record.get_value('sequence') == 'AAK'
        assert record.get_value('charge') == 3

    def test_malformed_cells_reported(self, peptide_registry):
        frame = pd.DataFrame({'sequence': ['AAK', 'CCK'], 'unique': ['1', 'perhaps']})
        records, errors = frame_to_records(peptide_registry, frame)
        assert len(records) == 2
        assert len(errors) == 1
        assert isinstance(errors[0], MalformedCell)
        assert records[1].get_value('sequence') == 'CCK'

    def test_unknown_column(self, peptide_registry):
        frame = pd.DataFrame({'sequence': ['AAK'], 'score': [1.0]})
        with pytest.raises(UnboundSection, match="score"):
            frame_to_records(peptide_registry, frame)
