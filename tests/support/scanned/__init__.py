"""Package walked by the component scanning tests."""
