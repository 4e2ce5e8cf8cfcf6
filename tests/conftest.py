"""
Pytest configuration and shared fixtures.

Registries here are built fresh for every test so that registration tests can
mutate them freely.
"""

import pytest

from mztabcols.core.elements import MsRun
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.section import Section


PEPTIDE_HEADERS = [
    'sequence', 'accession', 'unique', 'database', 'database_version',
    'search_engine', 'modifications', 'retention_time', 'retention_time_window',
    'charge', 'mass_to_charge', 'spectra_ref',
]


def seeded_registry(section: Section) -> ColumnRegistry:
    """Registry for ``section`` holding only its mandatory columns."""
    registry = ColumnRegistry.create(section)
    registry.seed_mandatory()
    return registry


@pytest.fixture
def peptide_registry():
    return seeded_registry(Section.Peptide)


@pytest.fixture
def psm_registry():
    return seeded_registry(Section.PSM)


@pytest.fixture
def protein_registry():
    return seeded_registry(Section.Protein)


@pytest.fixture
def small_molecule_registry():
    return seeded_registry(Section.Small_Molecule)


@pytest.fixture
def runs():
    """Two declared runs, keyed by index."""
    return {1: MsRun(1), 2: MsRun(2)}
