"""ModLaunch: launch games with or without BepInEx plugins and stop them again."""
