"""Built-in CLI sub-commands for rpauth.

* :mod:`~rpauth.commands.profile` -- create, list, show and remove client
  profiles.
* :mod:`~rpauth.commands.negotiate` -- preview the client authentication
  method a profile would use.
* :mod:`~rpauth.commands.exchange` -- exchange an authorization code for
  tokens.

``profile`` exports a :class:`typer.Typer` sub-application; ``negotiate``
and ``exchange`` export plain callback functions registered directly on the
root app.
"""
