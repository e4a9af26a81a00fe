"""Config — modreg.yml settings and registry document loading."""
