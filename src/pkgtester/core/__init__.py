"""Process running, configuration, results and logging."""
