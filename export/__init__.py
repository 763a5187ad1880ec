from .csv_export import batch_results_to_csv, RESULT_CSV_HEADERS
from .excel_export import export_batch_results_to_excel, export_debug_to_excel

__all__ = [
    'batch_results_to_csv', 'RESULT_CSV_HEADERS',
    'export_batch_results_to_excel', 'export_debug_to_excel'
]
