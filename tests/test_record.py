"""Tests for Record storage, rendering and line loading."""

import logging

import pytest

from mztabcols.core.elements import Assay
from mztabcols.core.errors import MalformedCell, MissingPrerequisite, UnboundSection
from mztabcols.core.record import Record
from mztabcols.core.values import (
    MISSING,
    Modification,
    ModificationType,
    MzBoolean,
    SplitList,
    ValueType,
    cv_param,
)


def cells_of(record):
    return record.render().split('\t')[1:]


class TestGetSet:
    """Position-addressed access."""

    def test_unset_cell_is_missing(self, peptide_registry):
        record = Record(peptide_registry)
        assert record.get('10') is MISSING
        assert record.get_value('charge') is MISSING

    def test_unknown_position(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(UnboundSection):
            record.get('42')
        with pytest.raises(UnboundSection):
            record.set('42', 1)

    def test_unknown_header(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(UnboundSection, match="PSM_ID"):
            record.get_value('PSM_ID')

    def test_set_checks_type(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(TypeError):
            record.set('10', '2')
        assert record.get('10') is MISSING

    def test_set_none_clears(self, peptide_registry):
        record = Record(peptide_registry)
        record.set_value('charge', 3)
        record.set_value('charge', None)
        assert record.get_value('charge') is MISSING

    def test_set_by_descriptor(self, peptide_registry):
        record = Record(peptide_registry)
        mass = peptide_registry.find_by_header('mass_to_charge')
        record.set_value(mass, 512)
        assert record.get(mass.position) == 512.0

    def test_foreign_descriptor_rejected(self, peptide_registry, psm_registry):
        record = Record(peptide_registry)
        psm_id = psm_registry.find_by_header('PSM_ID')
        with pytest.raises(UnboundSection):
            record.get_value(psm_id)


class TestRendering:
    """Data line rendering."""

    def test_charge_scenario(self, peptide_registry):
        """Setting charge changes only the charge slot."""
        record = Record(peptide_registry)
        before = cells_of(record)
        assert before[9] == 'null'
        assert before == ['null'] * 12

        record.set_value('charge', 2)
        after = cells_of(record)
        assert after[9] == '2'
        assert [a for i, a in enumerate(after) if i != 9] == [b for i, b in enumerate(before) if i != 9]

    def test_prefix_and_order(self, peptide_registry, runs):
        record = Record(peptide_registry, runs)
        record.set_value('sequence', 'PEPTIDER')
        record.set_value('unique', True)
        record.append('search_engine', cv_param('MS', 'MS:1001207', 'Mascot'))
        record.append('retention_time', 10.5)
        record.append('retention_time', 11)
        record.set_text('spectra_ref', 'ms_run[1]:scan=3')
        line = record.render()
        assert line == (
            'PEP\tPEPTIDER\tnull\t1\tnull\tnull\t[MS, MS:1001207, Mascot, ]\tnull'
            '\t10.5|11.0\tnull\tnull\tnull\tms_run[1]:scan=3'
        )

    def test_blank_string_renders_null(self, peptide_registry):
        record = Record(peptide_registry)
        record.set_value('sequence', '')
        assert cells_of(record)[0] == 'null'
        assert record.get_value('sequence') is MISSING
        restored, errors = Record.from_line(peptide_registry, record.render())
        assert errors == []
        assert restored == record

    def test_to_dict(self, peptide_registry):
        record = Record(peptide_registry)
        record.set_value('sequence', 'AAK')
        mapping = record.to_dict()
        assert list(mapping)[0] == 'sequence'
        assert mapping['sequence'] == 'AAK'
        assert mapping['charge'] == 'null'

    def test_late_columns_visible(self, peptide_registry):
        record = Record(peptide_registry)
        column = peptide_registry.add_named('decoy', ValueType.BOOLEAN)
        record.set_value(column, MzBoolean.FALSE)
        assert cells_of(record)[-1] == '0'
        assert record.get_text('opt_global_decoy') == '0'


class TestAppend:
    """List cells created on first append."""

    def test_append_creates_list(self, peptide_registry):
        record = Record(peptide_registry)
        value = record.append('modifications', Modification(ModificationType.UNIMOD, '35', (4,)))
        assert isinstance(value, SplitList)
        assert value.delimiter == ','
        record.append('modifications', Modification(ModificationType.MOD, '00412', (7,)))
        assert record.get_text('modifications') == '4-UNIMOD:35,7-MOD:00412'

    def test_append_to_scalar_fails(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(TypeError, match="not a list"):
            record.append('charge', 2)

    def test_append_checks_item_type(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(TypeError):
            record.append('retention_time', 'early')
        assert record.get_value('retention_time') is MISSING


class TestSetText:
    """Parsing through the codec."""

    def test_set_text(self, peptide_registry):
        record = Record(peptide_registry)
        record.set_text('charge', ' 3 ')
        record.set_text('modifications', '3|4-MOD:00412')
        assert record.get_value('charge') == 3
        assert record.get_value('modifications')[0].position_numbers == (3, 4)

    def test_malformed_leaves_cell(self, peptide_registry):
        record = Record(peptide_registry)
        record.set_value('charge', 2)
        with pytest.raises(MalformedCell) as exc_info:
            record.set_text('charge', 'abc')
        assert exc_info.value.column == 'charge'
        assert record.get_value('charge') == 2

    def test_spectra_ref_without_runs(self, peptide_registry):
        record = Record(peptide_registry)
        with pytest.raises(MissingPrerequisite):
            record.set_text('spectra_ref', 'ms_run[1]:scan=3')


class TestLoading:
    """from_cells / from_line."""

    def test_from_line_round_trip(self, peptide_registry, runs):
        line = (
            'PEP\tKVPQVSTPTLVEVSR\tP02768\t0\tUniProtKB\t2013_08\t[MS, MS:1001207, Mascot, ]'
            '\t3-UNIMOD:35\t1336.7|1337.1\t1330.0|1340.0\t2\t1234.4\tms_run[2]:index=7'
        )
        record, errors = Record.from_line(peptide_registry, line, runs)
        assert errors == []
        assert record.render() == line
        assert record.get_value('unique') is MzBoolean.FALSE

    def test_malformed_cells_are_collected(self, peptide_registry, runs, caplog):
        cells = ['AAK', 'P1', 'maybe', 'db', 'v1', 'null', 'null', 'null', 'null', 'two', '1.5', 'null']
        with caplog.at_level(logging.WARNING, logger='mztabcols.core.record'):
            record, errors = Record.from_cells(peptide_registry, cells, runs)
        assert [e.column for e in errors] == ['unique', 'charge']
        assert record.get_value('unique') is MISSING
        assert record.get_value('charge') is MISSING
        assert record.get_value('sequence') == 'AAK'
        assert record.get_value('mass_to_charge') == 1.5
        assert "2 of 12 cells" in caplog.text

    def test_missing_prerequisite_is_collected(self, peptide_registry):
        cells = ['AAK'] + ['null'] * 10 + ['ms_run[1]:scan=1']
        record, errors = Record.from_cells(peptide_registry, cells)
        assert len(errors) == 1
        assert isinstance(errors[0], MissingPrerequisite)
        assert record.get_value('sequence') == 'AAK'

    def test_wrong_cell_count(self, peptide_registry):
        with pytest.raises(MalformedCell, match="expected 12 cells"):
            Record.from_cells(peptide_registry, ['AAK'])

    def test_wrong_prefix(self, peptide_registry):
        with pytest.raises(MalformedCell, match="expected prefix PEP"):
            Record.from_line(peptide_registry, 'PSM\t' + '\t'.join(['null'] * 12))

    def test_abundance_cells(self, protein_registry):
        protein_registry.add_abundance(Assay(1))
        cells = ['null'] * 10 + ['NaN']
        record, errors = Record.from_cells(protein_registry, cells)
        assert errors == []
        assert record.render().endswith('\tNaN')

    def test_equality(self, peptide_registry):
        a = Record(peptide_registry)
        b = Record(peptide_registry)
        a.set_value('charge', 2)
        assert a != b
        b.set_text('charge', '2')
        assert a == b
