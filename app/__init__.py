"""
Streamlit dashboard for the deal simulator.
"""
