"""
Data Science Salary Visualizations
Interactive dashboards over the ds_salaries dataset
"""

__version__ = "0.1.0"
