"""Package walked by the scan filter tests."""
