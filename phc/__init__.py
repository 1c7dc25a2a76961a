"""Django project package for the PHC portal."""
