"""Feature extraction for the live tick: quick HR/HRV and EMG indicators."""
