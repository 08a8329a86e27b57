"""HR reports package.

Organized by record family (attendance, leaves, employees) with a reporting
layer on top: filter building, joins, grouping strategies, statistics and CSV
export, exposed through a thin Flask controller.
"""
