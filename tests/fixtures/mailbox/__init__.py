class Mailbox:
    def __init__(self, owner="nobody"):
        self.owner = owner
