"""Transport tools for originprobe."""
