import click
from flask import current_app

from distillpress import db


def _context():
    from distillpress.services.context import DistillContext
    return DistillContext.from_app()


def install_plugin():
    """Create tables and any missing default options ("activation")."""
    db.create_all()
    ctx = _context()
    return ctx.settings_store.install_defaults()


def uninstall_plugin():
    """Remove every trace of the plugin: options, post meta, cached catalogs and the request log."""
    ctx = _context()
    summary = {
        'options': ctx.settings_store.uninstall(),
        'post_meta': ctx.host.delete_plugin_meta(),
        'model_cache': ctx.cache.clear_all(),
        'api_log': ctx.usage_log.clear(),
    }
    current_app.logger.info('DistillPress data purged', extra={'event': 'plugin_uninstalled', **summary})
    return summary


def register_cli(app):
    @app.cli.group('distillpress')
    def distillpress_cli():
        """DistillPress maintenance commands."""

    @distillpress_cli.command('install')
    def install_command():
        created = install_plugin()
        click.echo(f'[distillpress] Installed; {created} default option(s) created')

    @distillpress_cli.command('uninstall')
    @click.option('--yes', is_flag=True, help='Skip the confirmation prompt.')
    def uninstall_command(yes):
        if not yes:
            click.confirm('Delete all DistillPress settings, summaries, caches and logs?', abort=True)
        summary = uninstall_plugin()
        for name, count in summary.items():
            click.echo(f'[distillpress] removed {count} {name} row(s)')

    @distillpress_cli.command('clear-model-cache')
    def clear_model_cache_command():
        removed = _context().cache.clear_all()
        click.echo(f'[distillpress] removed {removed} cached model catalog(s)')
