"""Tests for ColumnRegistry seeding, registration families and lookups."""

import logging

import pytest

from mztabcols.core.column import ColumnDescriptor, ColumnFamily
from mztabcols.core.elements import Assay, MsRun, StudyVariable
from mztabcols.core.errors import SchemaViolation
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.section import Section
from mztabcols.core.values import ValueType, cv_param

from conftest import PEPTIDE_HEADERS


def snapshot(registry):
    return (
        registry.stable_columns,
        registry.optional_columns,
        registry.abundance_columns,
        registry.columns,
    )


class TestCreateAndSeed:
    """Registry creation and mandatory columns."""

    @pytest.mark.parametrize("section", [Section.Comment, Section.Metadata])
    def test_create_rejects_non_table_sections(self, section):
        with pytest.raises(SchemaViolation, match="no column layout"):
            ColumnRegistry.create(section)

    def test_create_normalises_section(self):
        registry = ColumnRegistry.create(Section.Peptide)
        assert registry.section is Section.Peptide_Header
        assert registry.data_section is Section.Peptide
        assert len(registry) == 0

    def test_peptide_seed_scenario(self):
        """Fresh peptide registry: 12 mandatory columns ordered 01..12."""
        registry = ColumnRegistry.create(Section.Peptide)
        columns = registry.seed_mandatory()

        assert len(columns) == 12
        assert registry.positions() == [f"{i:02d}" for i in range(1, 13)]
        assert registry.headers() == PEPTIDE_HEADERS
        assert registry.header_line() == (
            "PEH\tsequence\taccession\tunique\tdatabase\tdatabase_version\tsearch_engine"
            "\tmodifications\tretention_time\tretention_time_window\tcharge\tmass_to_charge"
            "\tspectra_ref"
        )
        assert registry.optional_columns == {}

    @pytest.mark.parametrize("section,count,first,last", [
        (Section.Protein, 10, 'accession', 'protein_coverage'),
        (Section.PSM, 17, 'sequence', 'end'),
        (Section.Small_Molecule, 16, 'identifier', 'modifications'),
    ])
    def test_other_sections(self, section, count, first, last):
        registry = ColumnRegistry.create(section)
        registry.seed_mandatory()
        headers = registry.headers()
        assert len(headers) == count
        assert headers[0] == first
        assert headers[-1] == last
        assert registry.header_line().startswith(section.to_header_section().prefix + '\t')

    def test_seeding_twice_fails_without_changes(self, peptide_registry):
        before = snapshot(peptide_registry)
        with pytest.raises(SchemaViolation):
            peptide_registry.seed_mandatory()
        assert snapshot(peptide_registry) == before


class TestScoreFamily:
    """best_search_engine_score / search_engine_score registration."""

    def test_psm_per_run_score_scenario(self, psm_registry):
        """Run 1 registered after run 2 still sorts before it."""
        template = psm_registry.catalogue.template('search_engine_score')

        run2 = psm_registry.add_score_family(template, 1, MsRun(2))
        assert run2.header == 'search_engine_score[1]_ms_run[2]'

        run1 = psm_registry.add_score_family(template, 1, MsRun(1))
        assert run1.header == 'search_engine_score[1]_ms_run[1]'
        assert run1.position < run2.position
        assert psm_registry.headers()[-2:] == [run1.header, run2.header]

    def test_best_score_header(self, peptide_registry):
        template = peptide_registry.catalogue.template('best_search_engine_score')
        column = peptide_registry.add_score_family(template, 3)
        assert column.header == 'best_search_engine_score[3]'
        assert column.family is ColumnFamily.BEST_SCORE
        assert peptide_registry.find_by_header('best_search_engine_score[3]') is column

    def test_score_without_run(self, psm_registry):
        template = psm_registry.catalogue.template('search_engine_score')
        column = psm_registry.add_score_family(template, 2)
        assert column.header == 'search_engine_score[2]'

    def test_non_score_descriptor_is_noop(self, peptide_registry):
        before = snapshot(peptide_registry)
        other = ColumnDescriptor('charge', ValueType.INTEGER, 10)
        assert peptide_registry.add_score_family(other, 1) is None
        assert snapshot(peptide_registry) == before

    def test_best_score_not_defined_for_psm(self, psm_registry):
        best = ColumnDescriptor(
            'best_search_engine_score', ValueType.DOUBLE, 18, family=ColumnFamily.BEST_SCORE
        )
        assert psm_registry.add_score_family(best, 1) is None

    def test_duplicate_score_fails(self, peptide_registry):
        template = peptide_registry.catalogue.template('search_engine_score')
        peptide_registry.add_score_family(template, 1, MsRun(1))
        before = snapshot(peptide_registry)
        with pytest.raises(SchemaViolation, match="already used"):
            peptide_registry.add_score_family(template, 1, MsRun(1))
        assert snapshot(peptide_registry) == before

    def test_score_ids_group_before_runs(self, peptide_registry):
        template = peptide_registry.catalogue.template('search_engine_score')
        for score_id in (2, 1):
            for index in (2, 1):
                peptide_registry.add_score_family(template, score_id, MsRun(index))
        assert peptide_registry.headers()[-4:] == [
            'search_engine_score[1]_ms_run[1]',
            'search_engine_score[1]_ms_run[2]',
            'search_engine_score[2]_ms_run[1]',
            'search_engine_score[2]_ms_run[2]',
        ]

    def test_score_id_too_wide_for_position(self, peptide_registry):
        template = peptide_registry.catalogue.template('best_search_engine_score')
        with pytest.raises(SchemaViolation):
            peptide_registry.add_score_family(template, 1000)

    def test_scores_are_run_scoped(self, peptide_registry):
        template = peptide_registry.catalogue.template('search_engine_score')
        with pytest.raises(TypeError):
            peptide_registry.add_score_family(template, 1, Assay(1))


class TestIndexed:
    """Fixed-name columns repeated per run."""

    def test_suffix_determinism(self, protein_registry):
        """Indices 1, 2, 3 give increasing positions with one shared base order."""
        template = protein_registry.catalogue.template('num_psms')
        columns = [protein_registry.add_indexed(template, MsRun(i)) for i in (1, 2, 3)]

        positions = [column.position for column in columns]
        assert positions == sorted(positions)
        assert len(set(positions)) == 3
        assert {column.order for column in columns} == {template.order}
        assert [c.header for c in columns] == [
            'num_psms_ms_run[1]', 'num_psms_ms_run[2]', 'num_psms_ms_run[3]',
        ]

    def test_duplicate_indexed_fails(self, protein_registry):
        template = protein_registry.catalogue.template('num_peptides_distinct')
        protein_registry.add_indexed(template, MsRun(1))
        before = snapshot(protein_registry)
        with pytest.raises(SchemaViolation):
            protein_registry.add_indexed(template, MsRun(1))
        assert snapshot(protein_registry) == before

    def test_indexed_not_defined_for_peptide(self, peptide_registry, protein_registry):
        template = protein_registry.catalogue.template('num_psms')
        assert peptide_registry.add_indexed(template, MsRun(1)) is None
        assert len(peptide_registry) == 12

    def test_indexed_requires_run(self, protein_registry):
        template = protein_registry.catalogue.template('num_psms')
        with pytest.raises(TypeError, match="MsRun"):
            protein_registry.add_indexed(template, Assay(1))
        assert len(protein_registry) == 10

    def test_index_too_wide_for_position(self, protein_registry):
        template = protein_registry.catalogue.template('num_psms')
        before = snapshot(protein_registry)
        with pytest.raises(SchemaViolation, match="no valid logical position"):
            protein_registry.add_indexed(template, MsRun(1000))
        assert snapshot(protein_registry) == before

    def test_out_of_order_registration_still_sorted(self, protein_registry):
        psms = protein_registry.catalogue.template('num_psms')
        distinct = protein_registry.catalogue.template('num_peptides_distinct')
        protein_registry.add_indexed(distinct, MsRun(1))
        protein_registry.add_indexed(psms, MsRun(2))
        protein_registry.add_indexed(psms, MsRun(1))
        assert protein_registry.headers()[10:] == [
            'num_psms_ms_run[1]', 'num_psms_ms_run[2]', 'num_peptides_distinct_ms_run[1]',
        ]


class TestNamedColumns:
    """Free-form and CV-named optional columns."""

    def test_global_and_scoped_headers(self, peptide_registry):
        a = peptide_registry.add_named('decoy', ValueType.BOOLEAN)
        b = peptide_registry.add_named('intensity', ValueType.DOUBLE, element=Assay(2))
        assert a.header == 'opt_global_decoy'
        assert b.header == 'opt_assay[2]_intensity'
        assert peptide_registry.headers()[-2:] == [a.header, b.header]

    def test_default_order_follows_registered_columns(self, peptide_registry):
        """Default order is one past the largest registered order."""
        column = peptide_registry.add_named('x', ValueType.STRING)
        assert column.order == '13'
        second = peptide_registry.add_named('y', ValueType.STRING)
        assert second.order == '14'

    def test_default_order_after_fixed_optional(self, peptide_registry):
        peptide_registry.add_uri()
        column = peptide_registry.add_named('x', ValueType.STRING)
        assert column.order == '17'
        assert peptide_registry.headers()[-2:] == ['uri', 'opt_global_x']

    def test_explicit_order_collision(self, peptide_registry):
        peptide_registry.add_named('x', ValueType.STRING, order=40)
        before = snapshot(peptide_registry)
        with pytest.raises(SchemaViolation):
            peptide_registry.add_named('y', ValueType.STRING, order=40)
        assert snapshot(peptide_registry) == before

    def test_explicit_order_with_distinct_scopes(self, peptide_registry):
        a = peptide_registry.add_named('x', ValueType.STRING, order=40, element=Assay(1))
        b = peptide_registry.add_named('x', ValueType.STRING, order=40, element=Assay(2))
        assert a.position == '40001'
        assert b.position == '40002'

    def test_order_overflow(self, peptide_registry):
        peptide_registry.add_named('last', ValueType.STRING, order=99)
        with pytest.raises(SchemaViolation, match="No base order"):
            peptide_registry.add_named('more', ValueType.STRING)

    def test_cv_named_header(self, psm_registry):
        param = cv_param('MS', 'MS:1002217', 'decoy peptide')
        column = psm_registry.add_cv_named(param, ValueType.BOOLEAN)
        assert column.header == 'opt_global_cv_MS:1002217_decoy_peptide'
        scoped = psm_registry.add_cv_named(param, ValueType.BOOLEAN, element=StudyVariable(1))
        assert scoped.header == 'opt_study_variable[1]_cv_MS:1002217_decoy_peptide'

    def test_named_rejects_whitespace(self, peptide_registry):
        with pytest.raises(ValueError):
            peptide_registry.add_named('two words', ValueType.STRING)


class TestAbundance:
    """Abundance columns for assays and study variables."""

    def test_assay_abundance(self, protein_registry):
        columns = protein_registry.add_abundance(Assay(1))
        assert [c.header for c in columns] == ['protein_abundance_assay[1]']
        assert protein_registry.abundance_columns == {columns[0].position: columns[0]}

    def test_study_variable_triple(self, small_molecule_registry):
        columns = small_molecule_registry.add_abundance(StudyVariable(2))
        assert [c.header for c in columns] == [
            'smallmolecule_abundance_study_variable[2]',
            'smallmolecule_abundance_stdev_study_variable[2]',
            'smallmolecule_abundance_std_error_study_variable[2]',
        ]
        assert len({c.order for c in columns}) == 1
        assert [c.position for c in columns] == sorted(c.position for c in columns)

    def test_same_kind_shares_order(self, peptide_registry):
        first = peptide_registry.add_abundance(Assay(1))[0]
        peptide_registry.add_named('between', ValueType.STRING)
        second = peptide_registry.add_abundance(Assay(2))[0]
        assert first.order == second.order
        assert peptide_registry.headers()[12:] == [
            'peptide_abundance_assay[1]', 'peptide_abundance_assay[2]', 'opt_global_between',
        ]

    def test_abundance_is_atomic(self, protein_registry):
        protein_registry.add_abundance(StudyVariable(1))
        before = snapshot(protein_registry)
        with pytest.raises(SchemaViolation):
            protein_registry.add_abundance(StudyVariable(1))
        assert snapshot(protein_registry) == before

    def test_mapping_consistency(self, protein_registry):
        protein_registry.add_abundance(StudyVariable(1))
        protein_registry.add_reliability()
        union = protein_registry.columns
        stable = protein_registry.stable_columns
        optional = protein_registry.optional_columns
        assert set(union) == set(stable) | set(optional)
        assert not set(stable) & set(optional)
        assert set(protein_registry.abundance_columns) <= set(optional)


class TestFixedOptional:
    """reliability, uri and go_terms."""

    def test_peptide_fixed_orders(self, peptide_registry):
        reliability = peptide_registry.add_reliability()
        uri = peptide_registry.add_uri()
        assert (reliability.order, uri.order) == ('15', '16')

    def test_go_terms_only_for_proteins(self, protein_registry, peptide_registry):
        assert protein_registry.add_go_terms().header == 'go_terms'
        with pytest.raises(SchemaViolation, match="go_terms"):
            peptide_registry.add_go_terms()

    def test_explicit_order(self, psm_registry):
        column = psm_registry.add_uri(order=50)
        assert column.position == '50'


class TestQueries:
    """Lookups and classification."""

    def test_find_by_header_is_case_insensitive(self, psm_registry):
        column = psm_registry.find_by_header('  psm_id ')
        assert column is not None
        assert column.header == 'PSM_ID'
        assert psm_registry.find_by_header('nothing') is None

    def test_find_by_position(self, peptide_registry):
        assert peptide_registry.find_by_position('10').header == 'charge'
        assert peptide_registry.find_by_position('77') is None

    def test_find_by_order(self, protein_registry):
        template = protein_registry.catalogue.template('num_psms')
        for index in (1, 2):
            protein_registry.add_indexed(template, MsRun(index))
        assert [c.header for c in protein_registry.find_by_order(template.order)] == [
            'num_psms_ms_run[1]', 'num_psms_ms_run[2]',
        ]

    def test_offset_map(self, peptide_registry):
        offsets = peptide_registry.offset_map()
        assert offsets[1].header == 'sequence'
        assert offsets[12].header == 'spectra_ref'

    @pytest.mark.parametrize("header,expected", [
        ('opt_global_decoy', True),
        ('search_engine_score[1]_ms_run[3]', True),
        ('best_search_engine_score[2]', True),
        ('peptide_abundance_assay[1]', True),
        ('reliability', True),
        ('search_engine', False),
        ('charge', False),
        ('protein_abundance_assay[1]', False),
    ])
    def test_is_optional_header(self, peptide_registry, header, expected):
        assert peptide_registry.is_optional_header(header) is expected

    def test_protein_optional_prefixes(self, protein_registry):
        assert protein_registry.is_optional_header('num_psms_ms_run[4]')
        assert protein_registry.is_optional_header('go_terms')

    def test_contains_and_iter(self, peptide_registry):
        charge = peptide_registry.find_by_header('charge')
        assert charge in peptide_registry
        assert '10' in peptide_registry
        assert [c.header for c in peptide_registry] == PEPTIDE_HEADERS

    def test_positions_sorted_after_mixed_registration(self, protein_registry):
        """Display order equals position order no matter the registration order."""
        catalogue = protein_registry.catalogue
        protein_registry.add_named('late', ValueType.STRING)
        protein_registry.add_abundance(Assay(1))
        protein_registry.add_uri()
        protein_registry.add_score_family(catalogue.template('best_search_engine_score'), 1)
        positions = protein_registry.positions()
        assert positions == sorted(positions)
        headers = protein_registry.headers()
        assert headers.index('best_search_engine_score[1]') < headers.index('uri')
        assert headers.index('uri') < headers.index('opt_global_late')

    def test_registration_logs(self, peptide_registry, caplog):
        with caplog.at_level(logging.DEBUG, logger='mztabcols.core.registry'):
            peptide_registry.add_named('logged', ValueType.STRING)
        assert "opt_global_logged" in caplog.text
