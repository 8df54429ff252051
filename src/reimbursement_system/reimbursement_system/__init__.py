"""Reimbursement System package.

This package is organized by feature modules (users, departments, employees,
bills, ...) with a thin Flask controller layer and service/repository layers.
"""
