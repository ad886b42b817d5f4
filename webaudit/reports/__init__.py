"""
Report rendering and persistence.

Contains:
- renderers - JSON / HTML / Markdown
- ReportGenerator - запись файлов и сводка в консоль
"""
