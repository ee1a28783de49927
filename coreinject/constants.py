# Program header type
PT_LOAD     = 1

# Symbol map record kinds
KIND_DIRECT   = 'D'
KIND_NULL     = 'N'
KIND_INDIRECT = 'I'

DIRECT_KINDS   = (KIND_DIRECT, KIND_NULL)
INDIRECT_KINDS = (KIND_INDIRECT, )

# Command line
DATA_OPTION = '--data='
