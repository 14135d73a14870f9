"""Provider classes scanned by the module universe tests."""
