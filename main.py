"""CardioDashboard - Main Entry Point

Desktop client that drives the synthetic ECG risk backend.
"""
from cardio_dashboard.app import main

if __name__ == "__main__":
    main()
