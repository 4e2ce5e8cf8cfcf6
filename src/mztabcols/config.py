"""
Table layout configuration.

Describes which optional columns a file's tables carry, so a registry can be
built in one call instead of a sequence of registrations. Supports YAML and
JSON files.

Example layout (YAML):

    ms_runs: [1, 2]
    assays: [1, 2, 3]
    study_variables: [1]
    sections:
      protein:
        best_search_engine_scores: [1]
        search_engine_scores: [1]
        indexed: [num_psms, num_peptides_distinct]
        reliability: true
        go_terms: true
        abundance: [assay, study_variable]
      peptide:
        search_engine_scores: [1, 2]
        optional:
          - name: decoy
            type: BOOLEAN
          - cv: {label: MS, accession: "MS:1002217", name: decoy peptide}
            type: BOOLEAN
            scope: "assay[1]"

``ms_runs``, ``assays`` and ``study_variables`` may also be plain counts.
Per-run columns (scores, indexed columns) are registered once per declared run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from mztabcols.core.column import ColumnFamily
from mztabcols.core.elements import Assay, MsRun, StudyVariable, parse_element_reference
from mztabcols.core.registry import ColumnRegistry
from mztabcols.core.section import Section
from mztabcols.core.values import ValueType, cv_param

__all__ = [
    'OptionalColumnConfig',
    'SectionLayoutConfig',
    'TableLayoutConfig',
    'load_config',
    'validate_config',
    'parse_layout',
    'build_registry',
]

_SECTION_KEYS = {
    'protein': Section.Protein,
    'peptide': Section.Peptide,
    'psm': Section.PSM,
    'small_molecule': Section.Small_Molecule,
}

_ABUNDANCE_KINDS = ('assay', 'ms_run', 'study_variable')


@dataclass
class OptionalColumnConfig:
    """Free-form or CV-named optional column."""
    name: Optional[str] = None
    cv: Optional[Dict[str, str]] = None
    type: str = "STRING"
    scope: Optional[str] = None
    order: Optional[int] = None


@dataclass
class SectionLayoutConfig:
    """Optional columns of one section."""
    best_search_engine_scores: List[int] = field(default_factory=list)
    search_engine_scores: List[int] = field(default_factory=list)
    indexed: List[str] = field(default_factory=list)
    reliability: bool = False
    uri: bool = False
    go_terms: bool = False
    abundance: List[str] = field(default_factory=list)
    optional: List[OptionalColumnConfig] = field(default_factory=list)


@dataclass
class TableLayoutConfig:
    """
    Complete layout: declared indexed elements plus per-section columns.

    Element lists hold 1-based indexes.
    """
    ms_runs: List[int] = field(default_factory=list)
    assays: List[int] = field(default_factory=list)
    study_variables: List[int] = field(default_factory=list)
    sections: Dict[str, SectionLayoutConfig] = field(default_factory=dict)

    def runs(self) -> Dict[int, MsRun]:
        """Declared runs by index, for spectra-reference resolution."""
        return {index: MsRun(index) for index in self.ms_runs}


def _read_yaml(handle) -> Any:
    try:
        return yaml.safe_load(handle)
    except yaml.YAMLError as e:
        raise ValueError(f"Layout file is not valid YAML: {e}")


def _read_json(handle) -> Any:
    try:
        return json.load(handle)
    except json.JSONDecodeError as e:
        raise ValueError(f"Layout file is not valid JSON: {e}")


_LAYOUT_READERS = {
    '.yaml': _read_yaml,
    '.yml': _read_yaml,
    '.json': _read_json,
}


def load_config(config_path: Path) -> Dict[str, Any]:
    """
    Read a table layout file into a plain dictionary.

    The reader is chosen by suffix (``.yaml``/``.yml`` or ``.json``). An empty
    file gives an empty layout, i.e. mandatory columns only.

    Parameters:
        config_path: Path to the layout file

    Returns:
        Raw layout dictionary, not yet validated (see :func:`parse_layout`)

    Raises:
        FileNotFoundError: If the layout file doesn't exist
        ValueError: If the suffix is unsupported or the content is not a mapping

    Examples:
        >>> layout = load_config(Path("layout.yaml"))
        >>> layout['sections']['peptide']['search_engine_scores']
        [1, 2]
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Layout file not found: {config_path}")

    reader = _LAYOUT_READERS.get(config_path.suffix.lower())
    if reader is None:
        raise ValueError(
            f"Unsupported layout file format '{config_path.suffix}' for {config_path.name}; "
            f"expected one of {', '.join(_LAYOUT_READERS)}"
        )
    with open(config_path, 'r') as f:
        layout = reader(f)

    if layout is None:
        return {}
    if not isinstance(layout, dict):
        raise ValueError(
            f"Layout file {config_path.name} must hold a mapping at top level, "
            f"got {type(layout).__name__}"
        )
    return layout


def _indexes(value: Any, key: str) -> List[int]:
    """Accept a count (3 -> [1, 2, 3]) or an explicit list of indexes."""
    if value is None:
        return []
    if isinstance(value, bool):
        raise ValueError(f"'{key}' must be a count or a list of indexes, got: {value}")
    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"'{key}' count must not be negative, got: {value}")
        return list(range(1, value + 1))
    if isinstance(value, list):
        for index in value:
            if isinstance(index, bool) or not isinstance(index, int) or index <= 0:
                raise ValueError(f"'{key}' indexes must be positive integers, got: {index}")
        return list(value)
    raise ValueError(f"'{key}' must be a count or a list of indexes, got: {value}")


def validate_config(config: Dict[str, Any]) -> None:
    """
    Validate configuration structure and values.

    Performs basic validation:
    - Known section names
    - Valid value types, abundance kinds and scopes
    - Positive score ids and element indexes

    Parameters:
        config: Configuration dictionary

    Raises:
        ValueError: If configuration is invalid
    """
    for key in ('ms_runs', 'assays', 'study_variables'):
        if key in config:
            _indexes(config[key], key)

    sections = config.get('sections') or {}
    if not isinstance(sections, dict):
        raise ValueError("'sections' must be a mapping of section name to layout")

    for name, layout in sections.items():
        if name not in _SECTION_KEYS:
            raise ValueError(
                f"Invalid section '{name}'. "
                f"Choose from: {', '.join(_SECTION_KEYS)}"
            )
        layout = layout or {}
        if not isinstance(layout, dict):
            raise ValueError(f"Layout of section '{name}' must be a mapping")
        unknown = set(layout) - set(SectionLayoutConfig.__dataclass_fields__)
        if unknown:
            raise ValueError(f"Unknown keys in section '{name}': {', '.join(sorted(unknown))}")

        for key in ('best_search_engine_scores', 'search_engine_scores'):
            for score_id in layout.get(key) or []:
                if isinstance(score_id, bool) or not isinstance(score_id, int) or score_id <= 0:
                    raise ValueError(f"{name}.{key}: score ids must be positive integers, got: {score_id}")

        for kind in layout.get('abundance') or []:
            if kind not in _ABUNDANCE_KINDS:
                raise ValueError(
                    f"Invalid abundance kind '{kind}' in {name}. "
                    f"Choose from: {', '.join(_ABUNDANCE_KINDS)}"
                )

        for column in layout.get('optional') or []:
            if not isinstance(column, dict):
                raise ValueError(f"{name}.optional entries must be mappings, got: {column}")
            unknown = set(column) - set(OptionalColumnConfig.__dataclass_fields__)
            if unknown:
                raise ValueError(f"Unknown keys in {name}.optional entry: {', '.join(sorted(unknown))}")
            if bool(column.get('name')) == bool(column.get('cv')):
                raise ValueError(f"{name}.optional entries need exactly one of 'name' or 'cv': {column}")
            value_type = column.get('type', 'STRING')
            if value_type not in ValueType.__members__:
                raise ValueError(
                    f"Invalid value type '{value_type}' in {name}.optional. "
                    f"Choose from: {', '.join(ValueType.__members__)}"
                )
            if column.get('scope') not in (None, 'global'):
                parse_element_reference(column['scope'])
            if column.get('cv'):
                cv = column['cv']
                if not isinstance(cv, dict) or not cv.get('accession') or not cv.get('name'):
                    raise ValueError(f"{name}.optional cv entries need 'accession' and 'name': {cv}")


def parse_layout(config: Dict[str, Any]) -> TableLayoutConfig:
    """Validate a configuration dictionary and convert it to a TableLayoutConfig."""
    validate_config(config)
    sections = {}
    for name, layout in (config.get('sections') or {}).items():
        layout = dict(layout or {})
        optional = [OptionalColumnConfig(**column) for column in layout.pop('optional', None) or []]
        sections[name] = SectionLayoutConfig(optional=optional, **layout)
    return TableLayoutConfig(
        ms_runs=_indexes(config.get('ms_runs'), 'ms_runs'),
        assays=_indexes(config.get('assays'), 'assays'),
        study_variables=_indexes(config.get('study_variables'), 'study_variables'),
        sections=sections,
    )


def _abundance_elements(kind: str, layout: TableLayoutConfig) -> list:
    if kind == 'assay':
        return [Assay(index) for index in layout.assays]
    if kind == 'ms_run':
        return [MsRun(index) for index in layout.ms_runs]
    return [StudyVariable(index) for index in layout.study_variables]


def build_registry(
    section: Section,
    config: Union[TableLayoutConfig, Dict[str, Any], None] = None,
) -> ColumnRegistry:
    """
    Build a registry with the mandatory columns plus the configured optional ones.

    Registration order: best scores, per-run scores, indexed columns,
    reliability, uri, go_terms, abundance columns, free-form columns.

    Args:
        section: Row-bearing section (data or header variant)
        config: Parsed layout, a raw configuration dictionary, or None for
            mandatory columns only

    Raises:
        SchemaViolation: If two configured columns resolve to the same position
        ValueError: If the configuration is invalid
    """
    if config is None:
        layout = TableLayoutConfig()
    elif isinstance(config, TableLayoutConfig):
        layout = config
    else:
        layout = parse_layout(config)

    registry = ColumnRegistry.create(section)
    registry.seed_mandatory()

    key = registry.data_section.name_token
    section_layout = layout.sections.get(key)
    if section_layout is None:
        return registry

    runs = [MsRun(index) for index in layout.ms_runs]
    catalogue = registry.catalogue

    best = catalogue.templates(ColumnFamily.BEST_SCORE)
    for score_id in section_layout.best_search_engine_scores:
        for template in best:
            registry.add_score_family(template, score_id)

    per_run = catalogue.templates(ColumnFamily.SCORE)
    for score_id in section_layout.search_engine_scores:
        for template in per_run:
            if runs:
                for run in runs:
                    registry.add_score_family(template, score_id, run)
            else:
                registry.add_score_family(template, score_id)

    for name in section_layout.indexed:
        template = catalogue.template(name)
        if template is None or template.family is not ColumnFamily.INDEXED:
            raise ValueError(f"'{name}' is not a per-run column of {registry.data_section.name}")
        for run in runs:
            registry.add_indexed(template, run)

    if section_layout.reliability:
        registry.add_reliability()
    if section_layout.uri:
        registry.add_uri()
    if section_layout.go_terms:
        registry.add_go_terms()

    for kind in section_layout.abundance:
        for element in _abundance_elements(kind, layout):
            registry.add_abundance(element)

    for column in section_layout.optional:
        value_type = ValueType[column.type]
        element = None
        if column.scope not in (None, 'global'):
            element = parse_element_reference(column.scope)
        if column.cv:
            param = cv_param(
                column.cv.get('label', 'MS'),
                column.cv['accession'],
                column.cv['name'],
                column.cv.get('value'),
            )
            registry.add_cv_named(param, value_type, column.order, element)
        else:
            registry.add_named(column.name, value_type, column.order, element)

    return registry
