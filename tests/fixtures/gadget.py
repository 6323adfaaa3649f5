class Gadget:
    def __init__(self, console):
        self.test = "test"

        console.log("gadget")
