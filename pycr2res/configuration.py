# -*- coding: utf-8 -*-
"""Loads configuration files

This module loads json configuration files from disk,
and combines them with the default settings,
to create one dict that contains all parameters.
It also checks that all parameters exists, and that
no new parameters have been added by accident.
"""

import copy
import json
import logging
from os.path import dirname, join

import jsonschema

logger = logging.getLogger(__name__)


def get_configuration(**kwargs):
    """Default configuration, with single parameters replaced

    Parameters
    ----------
    **kwargs
        parameters to set, in every section that has a parameter of that name

    Returns
    -------
    config : dict
        the validated configuration
    """
    config = read_config()

    for kwarg_key, kwarg_value in kwargs.items():
        for key, value in config.items():
            if isinstance(value, dict) and kwarg_key in value.keys():
                value[kwarg_key] = kwarg_value

    validate_config(config)
    return config


def load_config(configuration=None):
    """Load a configuration and combine it with the default values

    Parameters
    ----------
    configuration : dict, str, optional
        configuration values, or the name of a json file containing them.
        If None, the default configuration is used (default: None)

    Returns
    -------
    settings : dict
        the validated configuration
    """
    if configuration is None:
        logger.info("No configuration specified, using default values")
        config = {}
    elif isinstance(configuration, dict):
        config = copy.deepcopy(configuration)
    elif isinstance(configuration, str):
        logger.info("Loading configuration from %s", configuration)
        try:
            with open(configuration) as f:
                config = json.load(f)
        except FileNotFoundError:
            fname = join(dirname(__file__), "settings", configuration)
            with open(fname) as f:
                config = json.load(f)
    else:
        raise TypeError(f"Expected a dict or a filename, but got {type(configuration)}")

    # Combine the given settings, with default values
    settings = read_config()
    settings = update(settings, config)

    # If it doesn't raise an Exception everything is as expected
    validate_config(settings)
    logger.debug("Configuration succesfully validated")

    return settings


def update(dict1, dict2, check=True, name="dict1"):
    """
    Update entries in dict1 with entries of dict2 recursively,
    i.e. if the dict contains a dict value, values inside the dict will
    also be updated

    Parameters
    ----------
    dict1 : dict
        dict that will be updated
    dict2 : dict
        dict that contains the values to update
    check : bool
        If True, will warn about keys from dict2 that do not exist in dict1

    Returns
    -------
    dict1 : dict
        the updated dict
    """
    for key, value in dict2.items():
        if check and key not in dict1.keys():
            logger.warning(f"{key} is not contained in {name}")
        if isinstance(value, dict) and isinstance(dict1.get(key), dict):
            dict1[key] = update(dict1[key], value, check=check, name=key)
        else:
            dict1[key] = value
    return dict1


def read_config(fname="settings_pycr2res.json"):
    """Read the configuration file from disk

    If no filename is given it will load the default configuration.
    The configuration file must be a json file.

    Parameters
    ----------
    fname : str, optional
        Filename of the configuration. By default "settings_pycr2res.json",
        i.e. the default configuration

    Returns
    -------
    config : dict
        The read configuration file
    """
    this_dir = dirname(__file__)
    fname = join(this_dir, "settings", fname)

    with open(fname) as file:
        settings = json.load(file)
        return settings


def validate_config(config):
    """Test that the input configuration complies with the expected schema

    If the function runs through without raising an exception, the check was succesful.

    Parameters
    ----------
    config : dict
        Configurations to check

    Raises
    ------
    ValueError
        If there is a problem with the configuration.
        Usually that means a setting has an unallowed value.
    """
    fname = "settings_schema.json"
    this_dir = dirname(__file__)
    fname = join(this_dir, "settings", fname)

    with open(fname) as f:
        schema = json.load(f)
    try:
        jsonschema.validate(schema=schema, instance=config)
    except jsonschema.ValidationError as ve:
        logger.error("Configuration failed validation check.\n%s", ve.message)
        raise ValueError(ve.message)
