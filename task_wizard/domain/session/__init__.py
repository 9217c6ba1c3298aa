# Session = the wizard's progress for one conversation, keyed by session id.
#
# +---------------------+
# |     Transcript      |   (Posted by the UI on every turn)
# +---------------------+
#         |
#         v
# +---------------------+
# |     Extractor       |   (Latest actionable tool result -> task data)
# +---------------------+
#         |
#         v
# +------------------------------+
# |        Session record        |   (Stored under session:<id>)
# |------------------------------|
# | currentStep                  |
# | stepComplete                 |
# | taskData                     |
# +------------------------------+
#         |
#         v
#   [Step prompt + step tools for the next model call]
