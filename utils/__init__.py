from .export import sentiment_csv, export_csv, export_json, csv_filename

__all__ = ["sentiment_csv", "export_csv", "export_json", "csv_filename"]
