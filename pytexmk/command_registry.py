import inspect


class CommandRegistrationError(Exception):
    """Exception raised when attempting to register a duplicate subcommand."""

# Registry that stores all subcommands made available to the CLI dispatcher.
_COMMAND_SPECS = {}


def register_command(help_text, description=None, help=None):
    """Register a command handler for the CLI dispatcher.

    Arguments are derived from the handler signature: parameters without a
    default become positionals, ``*args`` becomes a positional taking any
    number of values, boolean defaults become switches and every other default
    becomes an option of the same type.
    """

    def decorator(func):
        name = func.__name__.replace("_", "-")
        if name in _COMMAND_SPECS:
            raise CommandRegistrationError(
                f"Command '{name}' already registered"
            )
        _COMMAND_SPECS[name] = {
            "handler": func,
            "help": help_text.strip(),
            "description": (
                description if description is not None else help_text
            ).strip(),
            "arguments": [],
        }
        signature = inspect.signature(func)
        argument_help = help if help is not None else {}
        for parameter in signature.parameters.values():
            if parameter.kind == inspect.Parameter.VAR_KEYWORD:
                continue
            flags = []
            kwargs = {}
            positional = False
            if parameter.kind == inspect.Parameter.VAR_POSITIONAL:
                flags.append(parameter.name)
                kwargs["nargs"] = "*"
                positional = True
            elif parameter.default is inspect.Parameter.empty:
                flags.append(parameter.name)
                positional = True
            else:
                flags.append("--" + parameter.name.replace("_", "-"))
                if isinstance(parameter.default, bool):
                    # bool("False") is True, so switches can't take a value
                    kwargs["action"] = "store_true"
                else:
                    kwargs["default"] = parameter.default
                    if parameter.default is not None:
                        kwargs["type"] = type(parameter.default)
            if parameter.name in argument_help:
                kwargs["help"] = argument_help[parameter.name].strip()
            _COMMAND_SPECS[name]["arguments"].append(
                {
                    "flags": flags,
                    "kwargs": kwargs,
                    "dest": parameter.name,
                    "positional": positional,
                    "variadic": (
                        parameter.kind == inspect.Parameter.VAR_POSITIONAL
                    ),
                }
            )
        return func

    return decorator
