"""
Tabular materialisation of records.

Key Functions:
    - records_to_frame: Records of one section as a pandas DataFrame
    - frame_to_records: DataFrame back to records, with cell diagnostics

Examples:
    >>> from mztabcols.io import records_to_frame
    >>> df = records_to_frame(records)
"""

from mztabcols.io.frames import records_to_frame, frame_to_records

__all__ = [
    'records_to_frame',
    'frame_to_records',
]
