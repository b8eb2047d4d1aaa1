from pkgctl.main import cli

cli()
