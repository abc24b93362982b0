import json
import logging
import os
import pathlib
import sys
from pathlib import Path
from typing import Callable

from ideas import helpers

import argparse

from ideas.document.controller import DocumentController
from ideas.document.errors import IdeasError


class IdeasCli:
    """
    Defines the functionality of the Ideas CLI.
    """

    SETTINGS = {
        'log_level': 'info',
        'unique_attachment_names': '1',
    }

    def __init__(self, args):
        self.args = args
        self.logger = self.setup_logging()
        self.apply_settings()
        self.controller = DocumentController()
        commands = {
            'new': self.new_document,
            'show': self.show,
            'set-text': self.set_text,
            'attach': self.attach,
            'detach': self.detach,
            'list': self.list_attachments,
            'extract': self.extract,
        }
        commands[self.args.command]()
        logging.info("Command {} completed".format(self.args.command))

    @staticmethod
    def __process_return(cb: Callable, error: str, code: int):
        """
        Run one of the controller methods. If it raises an error, this is logged and the CLI exits.

        :param cb: The controller function to run.
        :param error: The error message to display on failure.
        :param code: The exit code to use on error.
        :return: whatever the controller function returns.
        """
        try:
            return cb()
        except IdeasError as e:
            logging.critical('{0} {1}'.format(error, e))
            sys.exit(code)

    def open_document(self) -> None:
        """
        Load the document given on the command line. The CLI exits if the document can't be loaded.
        """
        logging.info("Opening {}...".format(self.args.bundle))
        IdeasCli.__process_return(
            lambda: self.controller.load_path(self.args.bundle),
            "Error opening document.", 3)

    def save_document(self) -> None:
        logging.info("Saving {}...".format(self.args.bundle))
        IdeasCli.__process_return(
            lambda: self.controller.save(self.args.bundle),
            "Error saving document.", 4)

    def read_text_argument(self) -> str:
        """
        Get the text given with ``--text`` or ``--from-file``.

        :return: the text, or an empty string if neither option was used.
        """
        if 'from_file' in self.args:
            try:
                with open(self.args.from_file) as fp:
                    return fp.read()
            except (IOError, OSError) as e:
                logging.critical('Could not read text from {0}: {1}'.format(self.args.from_file, e))
                sys.exit(2)
        if 'text' in self.args:
            return self.args.text
        return ''

    def new_document(self) -> None:
        """
        Create a new document bundle, optionally with some text.
        """
        if os.path.exists(self.args.bundle):
            logging.critical('{} already exists.'.format(self.args.bundle))
            sys.exit(5)
        self.controller.new_document()
        self.controller.set_text(self.read_text_argument())
        self.save_document()

    def show(self) -> None:
        self.open_document()
        print(self.controller.text, end='' if self.controller.text.endswith('\n') else '\n')

    def set_text(self) -> None:
        self.open_document()
        self.controller.set_text(self.read_text_argument())
        self.save_document()

    def attach(self) -> None:
        """
        Attach one or more files to a document. Unless ``unique_attachment_names`` is '0', files whose name is already
        taken are attached under a numbered name instead of replacing the existing attachment.
        """
        self.open_document()
        for source in self.args.files:
            name = source.name
            if 'name' in self.args and len(self.args.files) == 1:
                name = self.args.name
            if str(IdeasCli.SETTINGS['unique_attachment_names']) == '1':
                taken = [attachment.name for attachment in self.controller.current_attachments()]
                name = helpers.unique_name(taken, name)
            IdeasCli.__process_return(
                lambda: self.controller.add_attachment_from_path(source, name),
                "Error attaching {}.".format(source), 6)
            logging.info("Attached {0} as {1}".format(source, name))
        self.save_document()

    def detach(self) -> None:
        self.open_document()
        if self.controller.remove_attachment(self.args.name) is None:
            logging.critical('No attachment named {}.'.format(self.args.name))
            sys.exit(7)
        self.save_document()

    def list_attachments(self) -> None:
        """
        Print the attachments of a document: name, size, type and icon name, one per line.
        """
        self.open_document()
        classifier = self.controller.classifier
        for attachment in self.controller.current_attachments():
            size = len(attachment.contents) if attachment.is_regular_file else 0
            print('{0}\t{1}\t{2}\t{3}'.format(
                attachment.name,
                size,
                classifier.type_of(attachment) or '-',
                classifier.icon_names_for(attachment)[0]))

    def extract(self) -> None:
        self.open_document()
        success, data = self.controller.export_attachment(self.args.name, self.args.destination)
        if not success:
            logging.critical(data)
            sys.exit(8)
        logging.info(data)

    def apply_settings(self) -> None:
        """
        Load settings from the configuration file, This is normally in ~/Library/Application Support/Ideas/conf.json,
        but may be overridden with the --config option. Any configuration options specified via command-line options will
        override the values in the configuration file.
        """

        # Load settings from file
        if 'config' in self.args:
            # Load settings from custom configuration file
            if os.path.exists(self.args.config):
                conf_file = self.args.config
                self.logger.info('Using custom config file: {}'.format(conf_file))
            else:
                self.logger.critical('Configuration file {} not found.'.format(self.args.config))
                sys.exit(2)
        else:
            # Load settings from default configuration file
            conf_file = helpers.settings_folder() / 'conf.json'
            self.logger.info('Using default config file: {}'.format(conf_file))

        IdeasCli.merge_settings(conf_file)

        # Override settings from command line arguments
        self.override_config()

        logging.debug("Settings in use: {}".format(json.dumps(IdeasCli.SETTINGS, indent=2)))

    @staticmethod
    def merge_settings(conf_file: str) -> None:
        """
        Override any of the default settings of the Ideas CLI with settings found in a configuration file.
        """

        if os.path.exists(conf_file):
            with open(conf_file) as fp:
                try:
                    loaded_settings = json.loads(fp.read())
                    for key in IdeasCli.SETTINGS.keys():
                        if key in loaded_settings.keys():
                            IdeasCli.SETTINGS[key] = loaded_settings[key]
                except json.decoder.JSONDecodeError:
                    logging.critical("Your configuration file at {} is invalid. Please check syntax.".format(conf_file))
                    sys.exit(20)

    def override_config(self) -> None:
        """
        Override any settings (default or from configuration file) which have been specified as command-line options.
        """

        vargs = vars(self.args)
        for key in IdeasCli.SETTINGS.keys():
            if key in self.args:
                IdeasCli.SETTINGS[key] = vargs[key]

    def setup_logging(self) -> logging.Logger:
        """
        Sets up the logging system.

        :return: the logging helper for the CLI.
        """

        if 'log_dir' in self.args:
            if os.access(self.args.log_dir, os.W_OK | os.X_OK):
                log_folder = Path(self.args.log_dir)
            else:
                print("Specified log directory {} is not accessible.".format(self.args.log_dir))
                sys.exit(1)
        else:
            log_folder = helpers.LOG_LOCATION
        log_folder.mkdir(parents=True, exist_ok=True)

        log_levels = {
            'debug': logging.DEBUG,
            'info': logging.INFO,
            'warning': logging.WARNING,
            'critical': logging.CRITICAL
        }
        log_level = log_levels[self.args.log_level]

        logging.basicConfig(
            level=log_level,
            format='%(asctime)s %(levelname)s: %(message)s',
        )
        logging.getLogger().addHandler(logging.FileHandler(log_folder / helpers.log_file_name()))
        return logging.getLogger()


def main(argv=None):
    """
    Defines arguments accepted by the CLI.
    """

    parser = argparse.ArgumentParser(
        prog="Ideas CLI",
        description="Create and edit Ideas documents: rich text notes with attached files.",
    )

    # Cli-specific options
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        default=argparse.SUPPRESS,
        help="use to provide a path to a custom configuration file.")
    parser.add_argument(
        "--log-dir",
        type=pathlib.Path,
        default=argparse.SUPPRESS,
        help="specify a custom directory to use for logging.")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=['debug', 'info', 'critical', 'warning'],
        default='info',
        help="specify the logging level.")
    parser.add_argument(
        "--unique-attachment-names",
        type=str,
        choices=['0', '1'],
        default=argparse.SUPPRESS,
        help="set to 0 to let attachments replace existing attachments of the same name.")

    commands = parser.add_subparsers(dest='command', required=True)

    new_parser = commands.add_parser('new', help="create a new document.")
    new_parser.add_argument("bundle", type=pathlib.Path, help="path of the document to create.")
    new_parser.add_argument("--text", type=str, default=argparse.SUPPRESS, help="text of the document.")
    new_parser.add_argument("--from-file", type=pathlib.Path, default=argparse.SUPPRESS,
                            help="read the text of the document from a file.")

    show_parser = commands.add_parser('show', help="print the text of a document.")
    show_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")

    text_parser = commands.add_parser('set-text', help="replace the text of a document.")
    text_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")
    text_parser.add_argument("--text", type=str, default=argparse.SUPPRESS, help="new text of the document.")
    text_parser.add_argument("--from-file", type=pathlib.Path, default=argparse.SUPPRESS,
                             help="read the new text of the document from a file.")

    attach_parser = commands.add_parser('attach', help="attach files to a document.")
    attach_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")
    attach_parser.add_argument("files", type=pathlib.Path, nargs='+', help="files to attach.")
    attach_parser.add_argument("--name", type=str, default=argparse.SUPPRESS,
                               help="name to give the attachment, when attaching a single file.")

    detach_parser = commands.add_parser('detach', help="remove an attachment from a document.")
    detach_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")
    detach_parser.add_argument("name", type=str, help="name of the attachment.")

    list_parser = commands.add_parser('list', help="list the attachments of a document.")
    list_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")

    extract_parser = commands.add_parser('extract', help="copy an attachment out of a document.")
    extract_parser.add_argument("bundle", type=pathlib.Path, help="path of the document.")
    extract_parser.add_argument("name", type=str, help="name of the attachment.")
    extract_parser.add_argument("destination", type=pathlib.Path, help="file to write the attachment to.")

    IdeasCli(parser.parse_args(argv))


if __name__ == "__main__":
    main()
