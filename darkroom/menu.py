"""
The console front end.

Menu is built from an AppContext, which holds the configuration, the
project, and the input and output streams. Tests drive the menu by giving
the context a scripted input function.
"""

import os
import sys
import logging

import cv2

from .asset import ImageAsset, VideoAsset
from .config import load_config
from .errors import DarkroomError, LoadFailure
from .params import EffectSpec, AdjustmentSpec
from .project import Project

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_FILE = 'project.txt'
CONTRAST_HELP = "\t1 = nothing changes\n\t[0,1) = lower contrast\n\t(1,10] = higher contrast"


class AppContext:
    def __init__(self, *, config=None, project=None, inp=input, out=sys.stdout, project_path=DEFAULT_PROJECT_FILE):
        self.config = config or load_config()
        self.project = project if project is not None else Project()
        self.inp = inp
        self.out = out
        self.project_path = project_path


class Menu:
    def __init__(self, ctx:AppContext):
        self.ctx = ctx

    @property
    def project(self):
        return self.ctx.project

    def say(self, msg=""):
        print(msg, file=self.ctx.out)

    def banner(self, title):
        self.say("-"*10 + f" {title} " + "-"*10)

    def report(self, notices):
        for notice in notices:
            self.say(notice)

    ## typed input. End of input raises EOFError, which ends the menu.

    def read_str(self, prompt):
        self.say(prompt)
        return self.ctx.inp("").strip()

    def _read(self, prompt, convert):
        while True:
            text = self.read_str(prompt)
            try:
                return convert(text)
            except ValueError:
                self.say("~ INVALID INPUT")

    def read_int(self, prompt):
        return self._read(prompt, int)

    def read_float(self, prompt):
        return self._read(prompt, float)

    def read_bool(self, prompt):
        def convert(text):
            if text not in ('0','1'):
                raise ValueError(text)
            return text=='1'
        return self._read(prompt + " (yes:1 no:0)", convert)

    def choose(self, title, options):
        """Show a numbered menu and return the option entered"""
        self.banner(title)
        for (n, label) in enumerate(options, 1):
            self.say(f"{n}. {label}")
        self.say("0. Go back" if title != "MENU" else "0. Exit")
        return self.read_int("Enter option: ")

    ## main menu

    def run(self):
        try:
            self.engine()
        except EOFError:
            self.say()

    def engine(self):
        actions = {1:self.create, 2:self.edit, 3:self.delete, 4:self.display,
                   5:self.save_project, 6:self.open_project}
        while True:
            option = self.choose("MENU", ["Create", "Edit", "Delete", "Display", "Save project", "Open project"])
            if option == 0:
                return
            if option in actions:
                actions[option]()
            else:
                self.say("~ INVALID OPTION")

    def pick_index(self):
        """List the assets and read an index. Returns None if there is no valid choice."""
        if len(self.project)==0:
            self.say("~ NO IMAGES")
            return None
        for (i, asset) in enumerate(self.project):
            where = asset.source if isinstance(asset, VideoAsset) else asset.path
            self.say(f"Image: {i}\n\tName: {asset.name}\n\tPath: {where}")
        index = self.read_int("Give index: ")
        if not self.project.verify_index(index):
            self.say("~ INVALID INDEX")
            return None
        return index

    ## create

    def create(self):
        option = self.choose("CREATE", ["Effects", "Adjustments", "Editing", "Video (camera)", "Video (file)"])
        if option == 0:
            return
        if option == 1:
            asset = self.read_image(effect=True, adjustment=False)
        elif option == 2:
            asset = self.read_image(effect=False, adjustment=True)
        elif option == 3:
            asset = self.read_image(effect=True, adjustment=True)
        elif option in (4, 5):
            asset = self.read_video(from_camera = option==4)
        else:
            self.say("~ INVALID OPTION")
            return
        asset.favorite = self.read_bool("Is this a favorite image?")
        self.project.create(asset)
        self.load(asset)

    def load(self, asset):
        try:
            asset.load()
        except DarkroomError as e:
            logger.warning("load %s: %s", asset.name, e)
            self.say(e.notice)

    def read_effect(self):
        blur_radius = 0
        if self.read_bool("Do you want to blur it?"):
            blur_radius = self.read_int("Enter blur amount: ")
        return EffectSpec(blur_radius = blur_radius,
                          to_grayscale = self.read_bool("Do you want to apply Black and White effect?"),
                          to_cartoon = self.read_bool("Do you want to apply Cartoon effect?"))

    def read_adjustment(self):
        return AdjustmentSpec(brightness = self.read_float("Enter brightness [-100,100]: "),
                              contrast = self.read_float("Enter contrast [0,10]: \n" + CONTRAST_HELP),
                              hue = self.read_int("Enter hue [0,180]: "))

    def read_image(self, *, effect, adjustment):
        name = self.read_str("Enter name: ")
        path = self.ctx.config['images_dir']
        absolute = not self.read_bool("Do you want to use relative path?")
        if absolute:
            path = self.read_str("Enter path to image: ").strip('"')
        return ImageAsset(name, path=path, absolute=absolute,
                          effect = self.read_effect() if effect else None,
                          adjustment = self.read_adjustment() if adjustment else None,
                          config=self.ctx.config, out=self.ctx.out)

    def read_video(self, *, from_camera):
        name = self.read_str("Enter name (empty for a default name): ")
        if from_camera:
            source = int(self.ctx.config['camera'])
        else:
            source = self.read_str("Enter path to video: ").strip('"')
        return VideoAsset(name or None, source=source,
                          effect=self.read_effect(), adjustment=self.read_adjustment(),
                          config=self.ctx.config, out=self.ctx.out)

    ## edit

    def edit(self):
        index = self.pick_index()
        if index is None:
            return
        asset = self.project.get(index)
        while True:
            option = self.choose("CHOOSE OPTION", ["Effects", "Adjustments", "Apply all changes", "Reset"])
            if option == 0:
                return
            elif option == 1:
                self.edit_effects(asset)
            elif option == 2:
                self.edit_adjustments(asset)
            elif option == 3:
                notices = asset.apply_all()
                self.report(notices)
                if not notices:
                    self.say("~ CHANGES APPLIED SUCCESSFULLY")
            elif option == 4:
                try:
                    asset.reset()
                    self.say("~ IMAGE RESET SUCCESSFULLY")
                except DarkroomError as e:
                    self.say(e.notice)
            else:
                self.say("~ INVALID OPTION")

    def edit_effects(self, asset):
        while True:
            option = self.choose("CHOOSE EFFECT", ["Blur", "Black and White", "Cartoon"])
            if option == 0:
                return
            if option == 1:
                value = {'blur_radius': self.read_int("Enter blur amount: ")}
            elif option == 2:
                value = {'to_grayscale': self.read_bool("Do you want to apply Black and White effect to the image?")}
            elif option == 3:
                value = {'to_cartoon': self.read_bool("Do you want to apply Cartoon effect to the image?")}
            else:
                self.say("~ INVALID OPTION")
                continue
            if asset.has_effect:
                asset.update_effect(**value)
                self.say("~ EFFECT WAS SET SUCCESSFULLY")
            else:
                self.say("~ OBJECT IS NOT OF TYPE EFFECT OR EDITING")

    def edit_adjustments(self, asset):
        while True:
            option = self.choose("CHOOSE ADJUSTMENT", ["Brightness", "Contrast", "Hue"])
            if option == 0:
                return
            if option == 1:
                value = {'brightness': self.read_float("Enter brightness [-100,100]: ")}
            elif option == 2:
                value = {'contrast': self.read_float("Enter contrast [0,10]: \n" + CONTRAST_HELP)}
            elif option == 3:
                value = {'hue': self.read_int("Enter hue [0,180]: ")}
            else:
                self.say("~ INVALID OPTION")
                continue
            if asset.has_adjustment:
                asset.update_adjustment(**value)
                self.say("~ ADJUSTMENT WAS SET SUCCESSFULLY")
            else:
                self.say("~ OBJECT IS NOT OF TYPE ADJUSTMENT OR EDITING")

    ## delete and display

    def delete(self):
        index = self.pick_index()
        if index is None:
            return
        self.project.delete(index)
        self.say("~ IMAGE DELETED SUCCESSFULLY")

    def display(self):
        index = self.pick_index()
        if index is None:
            return
        asset = self.project.get(index)
        while True:
            option = self.choose("CHOOSE OPTION", ["INFO", "SHOW", "SAVE"])
            if option == 0:
                return
            elif option == 1:
                self.say(asset.info())
            elif option == 2:
                try:
                    asset.show()
                except (DarkroomError, cv2.error) as e:  # pylint: disable=catching-non-exception
                    logger.error("show %s: %s", asset.name, e)
                    self.say("~ OUTPUT FAILED")
            elif option == 3:
                try:
                    urn = asset.save()
                    self.say(f"~ SAVED SUCCESSFULLY TO {urn}")
                except DarkroomError as e:
                    self.say(e.notice)
            else:
                self.say("~ INVALID OPTION")

    ## projects

    def save_project(self):
        path = self.read_str(f"Enter project file (empty for {self.ctx.project_path}): ") or self.ctx.project_path
        try:
            self.project.save(path)
            self.ctx.project_path = path
            self.say("~ PROJECT SAVED SUCCESSFULLY")
        except DarkroomError as e:
            self.say(e.notice)

    def open_project(self, path=None):
        if path is None:
            path = self.read_str(f"Enter project file (empty for {self.ctx.project_path}): ") or self.ctx.project_path
        try:
            project = Project.open(path, config=self.ctx.config)
        except LoadFailure as e:
            self.say(e.notice)
            return
        for asset in project:
            asset.out = self.ctx.out
            if isinstance(asset, VideoAsset) and asset.from_camera:
                continue        # cameras record only when asked
            self.load(asset)
        self.ctx.project = project
        self.ctx.project_path = path
        self.say(f"~ OPENED {project.name} WITH {len(project)} ASSETS")


def quiet_opencv():
    """Stop OpenCV from writing its own log messages to the console"""
    try:
        cv2.utils.logging.setLogLevel(cv2.utils.logging.LOG_LEVEL_SILENT)
    except AttributeError:
        logger.debug("this OpenCV has no log level control")


def main(argv=None):
    import argparse
    parser = argparse.ArgumentParser(description="Edit photos and videos from the console",
                                     formatter_class=argparse.ArgumentDefaultsHelpFormatter)
    parser.add_argument("--config", help='YAML configuration file', default=None)
    parser.add_argument("--project", help='Project file to open at start', default=None)
    parser.add_argument("--workers", help='Threads for video processing', type=int)
    parser.add_argument("--verbose", help="Log what is happening", action='store_true')
    parser.add_argument("--debug", help="Log every frame", action='store_true')
    args = parser.parse_args(argv)

    config = load_config(args.config)
    if args.workers is not None:
        config['workers'] = args.workers
    level = 'DEBUG' if args.debug else 'INFO' if args.verbose else config['log_level']
    logging.basicConfig(level=level, format='%(asctime)s %(name)s %(levelname)s %(message)s')
    quiet_opencv()

    ctx = AppContext(config=config)
    menu = Menu(ctx)
    if args.project is not None:
        ctx.project_path = args.project
        if os.path.exists(args.project):
            menu.open_project(args.project)
    menu.run()


if __name__ == "__main__":
    main()
