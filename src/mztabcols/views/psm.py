"""PSM row accessors (PSM lines)."""

from __future__ import annotations

from mztabcols.core.section import Section
from mztabcols.views.base import EvidenceMixin, SectionRow, column_property

__all__ = ['PSMRow']


class PSMRow(EvidenceMixin, SectionRow):
    """Named access to a peptide-spectrum match row."""

    SECTION = Section.PSM

    sequence = column_property('sequence')
    psm_id = column_property('PSM_ID')
    accession = column_property('accession')
    unique = column_property('unique')
    exp_mass_to_charge = column_property('exp_mass_to_charge')
    calc_mass_to_charge = column_property('calc_mass_to_charge')
    pre = column_property('pre', "Residue before the peptide ('-' at the N-terminus).")
    post = column_property('post', "Residue after the peptide ('-' at the C-terminus).")
    start = column_property('start')
    end = column_property('end')
