"""Individual pages hosted by MainWindow's QStackedWidget."""
