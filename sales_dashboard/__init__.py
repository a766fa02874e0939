"""
Sales Activity Dashboard — Manager & Employee Performance

Analytics backend that turns a sales-activity Excel export into typed
records, joins activities onto ADRM opportunities and computes the
metrics shown on the manager and employee performance views.

To load a workbook:
    loaders.load_workbook_records(path_or_bytes) returns the opportunity,
    activity and time-detail records, or raises UnreadableFileError /
    NoUsableDataError.

To connect to Streamlit/Dash:
    Call dashboard.get_performance_view(opps, acts, details, selection)
    to get a plain dict with the metric set, de-duplicated activity log,
    monthly hours trend and top opportunities by hours.

To accept a new header spelling:
    Add it to the matching *_COLUMN_MAP in config.py, pointing at the
    canonical field name.
"""
