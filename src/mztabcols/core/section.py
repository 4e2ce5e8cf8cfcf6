"""
Section model for the tab-separated exchange format.

Every line of a file starts with a three-letter prefix naming the section it
belongs to. Table-based sections come in pairs: a header variant (one line per
table, listing the column headers) and a data variant (one line per row).

    Section                  Prefix   Data / header pair
    ----------------------   ------   ------------------
    Comment                  COM      -
    Metadata                 MTD      -
    Protein                  PRT      PRH
    Peptide                  PEP      PEH
    PSM                      PSM      PSH
    Small_Molecule           SML      SMH

Examples:
    >>> from mztabcols.core.section import Section
    >>> Section.Peptide.to_header_section()
    <Section.Peptide_Header: 'PEH'>
    >>> Section.from_prefix('SMH').name_token
    'small_molecule'
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

__all__ = ['Section']


class Section(Enum):
    """
    Line-level section of a file, keyed by its line prefix.

    Only the four table-based sections (and their header variants) carry
    columns; Comment and Metadata exist so that prefixes round-trip.
    """

    Comment = 'COM'
    Metadata = 'MTD'
    Protein_Header = 'PRH'
    Protein = 'PRT'
    Peptide_Header = 'PEH'
    Peptide = 'PEP'
    PSM_Header = 'PSH'
    PSM = 'PSM'
    Small_Molecule_Header = 'SMH'
    Small_Molecule = 'SML'

    @property
    def prefix(self) -> str:
        """Three-letter line prefix."""
        return self.value

    @property
    def name_token(self) -> Optional[str]:
        """Lower-case section name used in column headers (None for COM/MTD)."""
        return _NAME_TOKENS.get(self.to_data_section())

    @property
    def is_header(self) -> bool:
        return self in _HEADER_TO_DATA

    @property
    def is_table(self) -> bool:
        """True for the row-bearing sections and their header variants."""
        return self in _HEADER_TO_DATA or self in _DATA_TO_HEADER

    def to_header_section(self) -> Optional[Section]:
        """Header variant of a table section, or None for COM/MTD."""
        if self in _HEADER_TO_DATA:
            return self
        return _DATA_TO_HEADER.get(self)

    def to_data_section(self) -> Optional[Section]:
        """Data variant of a table section, or None for COM/MTD."""
        if self in _DATA_TO_HEADER:
            return self
        return _HEADER_TO_DATA.get(self)

    @classmethod
    def from_prefix(cls, prefix: str) -> Section:
        """
        Look up a section by its line prefix (case-insensitive).

        Raises:
            ValueError: If the prefix is not a known section prefix
        """
        key = str(prefix).strip().upper()
        for section in cls:
            if section.value == key:
                return section
        raise ValueError(f"Unknown section prefix: '{prefix}'")


_DATA_TO_HEADER = {
    Section.Protein: Section.Protein_Header,
    Section.Peptide: Section.Peptide_Header,
    Section.PSM: Section.PSM_Header,
    Section.Small_Molecule: Section.Small_Molecule_Header,
}

_HEADER_TO_DATA = {header: data for data, header in _DATA_TO_HEADER.items()}

_NAME_TOKENS = {
    Section.Protein: 'protein',
    Section.Peptide: 'peptide',
    Section.PSM: 'psm',
    Section.Small_Molecule: 'small_molecule',
}
