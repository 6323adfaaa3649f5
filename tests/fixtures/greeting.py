def greeting(name, punctuation="!"):
    return f"Hello, {name}{punctuation}"
