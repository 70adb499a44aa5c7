"""
Sales services: invoices, payments, quotations, reports.
"""
