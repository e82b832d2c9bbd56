"""PDF export of DerivedReports (fpdf2)."""
