"""Console front end: rendering, prompt loop and config."""
