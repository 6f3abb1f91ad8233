"""Front end for the analysis relay: session controller, relay client, speech and terminal UI."""
