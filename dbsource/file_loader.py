import configparser

# Section for keys that appear before the first header
ROOT_SECTION = '_'

# configparser's inherited-defaults section; a header is one line, so no
# "[...]" can ever name it and [DEFAULT] stays an ordinary section
_NO_DEFAULT_SECTION = '\n'


def load_ini(file):
    """
    Load a source definition file.

    Every ``[section]`` is returned as-is, ``[DEFAULT]`` included. Keys
    before the first header land in the ``_`` section. Keys keep their case,
    values are taken literally (no ``%`` interpolation, passwords often
    contain it) and a repeated key or section keeps the last value, as
    simple INI readers do.

    Returns:
        dict mapping section name to a dict of key/value strings
    """
    config = configparser.ConfigParser(interpolation=None, strict=False,
                                       default_section=_NO_DEFAULT_SECTION)
    config.optionxform = str

    with open(file, encoding='utf-8') as f:
        text = f.read()
    config.read_string(f"[{ROOT_SECTION}]\n{text}", source=str(file))

    sections = {section: dict(config[section]) for section in config.sections()}
    if not sections.get(ROOT_SECTION):
        sections.pop(ROOT_SECTION, None)
    return sections
